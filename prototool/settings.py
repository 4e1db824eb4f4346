"""Configuration types and the external form read from config files."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

DEFAULT_CONFIG_FILENAME = "prototool.yaml"


class ConfigError(ValueError):
    """Raised when a configuration is malformed or invalid."""


class GenPluginType(enum.IntEnum):
    """The kind of a protoc plugin, if any."""

    NONE = 0
    GO = 1
    GOGO = 2

    def is_go(self) -> bool:
        """Return True for Go plugins using the standard protobuf runtime."""
        return self is GenPluginType.GO

    def is_gogo(self) -> bool:
        """Return True for Go plugins using the gogo protobuf runtime."""
        return self is GenPluginType.GOGO

    def __str__(self) -> str:
        return _GEN_PLUGIN_TYPE_TO_STRING[self]


_GEN_PLUGIN_TYPE_TO_STRING = {
    GenPluginType.NONE: "",
    GenPluginType.GO: "go",
    GenPluginType.GOGO: "gogo",
}
_STRING_TO_GEN_PLUGIN_TYPE = {v: k for k, v in _GEN_PLUGIN_TYPE_TO_STRING.items()}


def parse_gen_plugin_type(s: str) -> GenPluginType:
    """Parse a GenPluginType from a case-insensitive string."""
    try:
        return _STRING_TO_GEN_PLUGIN_TYPE[s.lower()]
    except KeyError:
        raise ConfigError(f"could not parse {s} to a GenPluginType") from None


@dataclass
class OutputPath:
    """An output path, relative to the config directory and absolute."""

    rel_path: str = ""
    abs_path: str = ""


@dataclass
class GenPlugin:
    """A plugin to run during generation."""

    name: str = ""
    path: str = ""
    type: GenPluginType = GenPluginType.NONE
    flags: str = ""
    output_path: OutputPath = field(default_factory=OutputPath)


@dataclass
class GenGoPluginOptions:
    """Options shared by go and gogo plugins."""

    import_path: str = ""
    extra_modifiers: dict[str, str] = field(default_factory=dict)


@dataclass
class GenConfig:
    """The generation config."""

    go_plugin_options: GenGoPluginOptions = field(default_factory=GenGoPluginOptions)
    plugins: list[GenPlugin] = field(default_factory=list)


@dataclass
class LintConfig:
    """The lint config."""

    no_default: bool = False
    include_ids: list[str] = field(default_factory=list)
    exclude_ids: list[str] = field(default_factory=list)
    ignore_id_to_file_paths: dict[str, list[str]] = field(default_factory=dict)


@dataclass
class CreateConfig:
    """The create config: directory to base package."""

    dir_path_to_base_package: dict[str, str] = field(default_factory=dict)


@dataclass
class CompileConfig:
    """The compile config."""

    protobuf_version: str = ""
    include_paths: list[str] = field(default_factory=list)
    include_well_known_types: bool = False
    allow_unused_imports: bool = False


@dataclass
class Config:
    """The main, validated config. All paths are absolute."""

    dir_path: str = ""
    exclude_prefixes: list[str] = field(default_factory=list)
    compile: CompileConfig = field(default_factory=CompileConfig)
    create: CreateConfig = field(default_factory=CreateConfig)
    lint: LintConfig = field(default_factory=LintConfig)
    gen: GenConfig = field(default_factory=GenConfig)


def _mapping(value: Any, where: str, allowed: frozenset[str]) -> dict:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"{where}: expected a mapping, got {type(value).__name__}")
    unknown = sorted(str(key) for key in value if key not in allowed)
    if unknown:
        raise ConfigError(f"{where}: unknown field(s) {', '.join(unknown)}")
    return dict(value)


def _string(value: Any, where: str) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ConfigError(f"{where}: expected a string, got {type(value).__name__}")


def _bool(value: Any, where: str) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    raise ConfigError(f"{where}: expected a boolean, got {type(value).__name__}")


def _list(value: Any, where: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"{where}: expected a list, got {type(value).__name__}")
    return value


def _strings(value: Any, where: str) -> list[str]:
    return [_string(item, where) for item in _list(value, where)]


def _string_map(value: Any, where: str) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"{where}: expected a mapping, got {type(value).__name__}")
    return {_string(k, where): _string(v, where) for k, v in value.items()}


@dataclass
class _ExternalProtoc:
    allow_unused_imports: bool = False
    version: str = ""
    includes: list[str] = field(default_factory=list)

    @classmethod
    def _parse(cls, value: Any, where: str) -> _ExternalProtoc:
        data = _mapping(value, where, frozenset({"allow_unused_imports", "version", "includes"}))
        return cls(
            allow_unused_imports=_bool(data.get("allow_unused_imports"), where),
            version=_string(data.get("version"), where),
            includes=_strings(data.get("includes"), where),
        )


@dataclass
class _ExternalCreatePackage:
    directory: str = ""
    name: str = ""

    @classmethod
    def _parse(cls, value: Any, where: str) -> _ExternalCreatePackage:
        data = _mapping(value, where, frozenset({"directory", "name"}))
        return cls(
            directory=_string(data.get("directory"), where),
            name=_string(data.get("name"), where),
        )


@dataclass
class _ExternalCreate:
    packages: list[_ExternalCreatePackage] = field(default_factory=list)

    @classmethod
    def _parse(cls, value: Any, where: str) -> _ExternalCreate:
        data = _mapping(value, where, frozenset({"packages"}))
        sub = f"{where}.packages"
        return cls(
            packages=[
                _ExternalCreatePackage._parse(item, sub)
                for item in _list(data.get("packages"), sub)
            ]
        )


@dataclass
class _ExternalLintIgnore:
    id: str = ""
    files: list[str] = field(default_factory=list)

    @classmethod
    def _parse(cls, value: Any, where: str) -> _ExternalLintIgnore:
        data = _mapping(value, where, frozenset({"id", "files"}))
        return cls(
            id=_string(data.get("id"), where),
            files=_strings(data.get("files"), where),
        )


@dataclass
class _ExternalLintRules:
    no_default: bool = False
    add: list[str] = field(default_factory=list)
    remove: list[str] = field(default_factory=list)

    @classmethod
    def _parse(cls, value: Any, where: str) -> _ExternalLintRules:
        data = _mapping(value, where, frozenset({"no_default", "add", "remove"}))
        return cls(
            no_default=_bool(data.get("no_default"), where),
            add=_strings(data.get("add"), where),
            remove=_strings(data.get("remove"), where),
        )


@dataclass
class _ExternalLint:
    ignores: list[_ExternalLintIgnore] = field(default_factory=list)
    rules: _ExternalLintRules = field(default_factory=_ExternalLintRules)

    @classmethod
    def _parse(cls, value: Any, where: str) -> _ExternalLint:
        data = _mapping(value, where, frozenset({"ignores", "rules"}))
        sub = f"{where}.ignores"
        return cls(
            ignores=[
                _ExternalLintIgnore._parse(item, sub)
                for item in _list(data.get("ignores"), sub)
            ],
            rules=_ExternalLintRules._parse(data.get("rules"), f"{where}.rules"),
        )


@dataclass
class _ExternalGoOptions:
    import_path: str = ""
    extra_modifiers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def _parse(cls, value: Any, where: str) -> _ExternalGoOptions:
        data = _mapping(value, where, frozenset({"import_path", "extra_modifiers"}))
        return cls(
            import_path=_string(data.get("import_path"), where),
            extra_modifiers=_string_map(data.get("extra_modifiers"), where),
        )


@dataclass
class _ExternalGenPlugin:
    name: str = ""
    type: str = ""
    flags: str = ""
    output: str = ""
    path: str = ""

    @classmethod
    def _parse(cls, value: Any, where: str) -> _ExternalGenPlugin:
        keys = ("name", "type", "flags", "output", "path")
        data = _mapping(value, where, frozenset(keys))
        return cls(**{key: _string(data.get(key), where) for key in keys})


@dataclass
class _ExternalGen:
    go_options: _ExternalGoOptions = field(default_factory=_ExternalGoOptions)
    plugins: list[_ExternalGenPlugin] = field(default_factory=list)

    @classmethod
    def _parse(cls, value: Any, where: str) -> _ExternalGen:
        data = _mapping(value, where, frozenset({"go_options", "plugins"}))
        sub = f"{where}.plugins"
        return cls(
            go_options=_ExternalGoOptions._parse(data.get("go_options"), f"{where}.go_options"),
            plugins=[
                _ExternalGenPlugin._parse(item, sub)
                for item in _list(data.get("plugins"), sub)
            ],
        )


@dataclass
class ExternalConfig:
    """The config as written in a config file, before validation."""

    excludes: list[str] = field(default_factory=list)
    protoc: _ExternalProtoc = field(default_factory=_ExternalProtoc)
    create: _ExternalCreate = field(default_factory=_ExternalCreate)
    lint: _ExternalLint = field(default_factory=_ExternalLint)
    gen: _ExternalGen = field(default_factory=_ExternalGen)

    @classmethod
    def from_dict(cls, data: Any) -> ExternalConfig:
        """Build from parsed YAML data, rejecting unknown fields and bad types."""
        top = _mapping(
            data, "config", frozenset({"excludes", "protoc", "create", "lint", "generate"})
        )
        return cls(
            excludes=_strings(top.get("excludes"), "excludes"),
            protoc=_ExternalProtoc._parse(top.get("protoc"), "protoc"),
            create=_ExternalCreate._parse(top.get("create"), "create"),
            lint=_ExternalLint._parse(top.get("lint"), "lint"),
            gen=_ExternalGen._parse(top.get("generate"), "generate"),
        )