"""Protobuf tooling: configuration files, protoc download and caching, and protoc failure parsing."""

__version__ = "1.0.0.dev0"