"""Derive conventional file option values from package and file names."""

from __future__ import annotations

from prototool.strs import to_upper_camel_case


def _base_name(path: str) -> str:
    stripped = path.rstrip("/")
    if not stripped:
        return "/"
    return stripped.rsplit("/", 1)[-1]


def _strip_extension(name: str) -> str:
    dot = name.rfind(".")
    return name if dot < 0 else name[:dot]


def go_package(package_name: str) -> str:
    """Return the go_package value: the last package component followed by "pb"."""
    if not package_name:
        return ""
    return package_name.split(".")[-1] + "pb"


def java_outer_classname(filename: str) -> str:
    """Return the java_outer_classname value for a file name.

    This is the base name without extension, UpperCamelCased, followed by "Proto".
    """
    if not filename:
        return ""
    return to_upper_camel_case(_strip_extension(_base_name(filename))) + "Proto"


def java_package(package_name: str) -> str:
    """Return the java_package value: "com." followed by the package."""
    if not package_name:
        return ""
    return "com." + package_name