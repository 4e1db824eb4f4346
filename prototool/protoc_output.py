"""Protoc invocations and the interpretation of their error output."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Optional

from prototool.text import Failure

_LOGGER = logging.getLogger(__name__)

_PLUGIN_FAILED = re.compile(
    r"^--.*_out: protoc-gen-(.*): Plugin failed with status code (.*).$"
)
_OTHER_PLUGIN_FAILURE = re.compile(r"^--(.*)_out: (.*)$")
_EXTRA_IMPORT = re.compile(r"^(.*): warning: Import (.*) but not used.$")
_FILE_NOT_FOUND = re.compile(r"^(.*): File not found.$")
# protoc prints this alongside the file-not-found line, so it is dropped.
_IMPORT_NOT_FOUND = re.compile(r"^(.*): Import (.*) was not found or had errors.$")
_NO_SYNTAX_SPECIFIED = re.compile(
    r"No syntax specified for the proto file: (.*)\. Please use"
)
_JSON_CAMEL_CASE = re.compile(r"^(.*): (The JSON camel-case name of field.*)$")
_IS_NOT_DEFINED = re.compile(r"^(.*): (.*) is not defined.$")
_SEEMS_TO_BE_DEFINED = re.compile(
    r'^(.*): (".*" seems to be defined in ".*", which is not imported by ".*". '
    r"To use it here, please add the necessary import.)$"
)
_EXPLICIT_DEFAULT_VALUES_PROTO3 = re.compile(
    r"^(.*): Explicit default values are not allowed in proto3.$"
)
_OPTION_VALUE = re.compile(r"^(.*): Error while parsing option value for (.*)$")
_PROGRAM_NOT_FOUND = re.compile(
    r"protoc-gen-(.*): program not found or is not executable$"
)
_FIRST_ENUM_VALUE_ZERO = re.compile(
    r"^(.*): The first enum value must be zero in proto3.$"
)

_INTEGER = re.compile(r"[+-]?[0-9]+")


@dataclass
class ProtocCommand:
    """One protoc invocation over the proto files of a single directory."""

    args: list[str]
    proto_set: Any
    proto_files: Sequence[Any] = field(default_factory=list)
    descriptor_set_temp_file_path: str = ""

    def __str__(self) -> str:
        return " ".join(self.args)

    def clean(self) -> None:
        """Remove the temporary descriptor set file, if any."""
        if self.descriptor_set_temp_file_path:
            try:
                os.remove(self.descriptor_set_temp_file_path)
            except OSError:
                pass


def _allow_unused_imports(command: ProtocCommand) -> bool:
    return bool(command.proto_set.config.compile.allow_unused_imports)


def _atoi(s: str) -> Optional[int]:
    if _INTEGER.fullmatch(s) is None:
        return None
    return int(s)


def parse_protoc_output(
    command: ProtocCommand, output: str, logger: Optional[logging.Logger] = None
) -> list[Failure]:
    """Turn all non-empty lines of protoc's stderr into failures."""
    failures: list[Failure] = []
    for raw_line in output.strip().split("\n"):
        line = raw_line.strip()
        if not line:
            continue
        failure = parse_protoc_line(command, line, logger)
        if failure is not None:
            failures.append(failure)
    return failures


def _uninterpreted(line: str, logger: logging.Logger) -> Failure:
    logger.warning(
        "protoc returned a line we do not understand, please file this as an issue: %s",
        line,
    )
    return Failure(message=line)


def parse_protoc_line(
    command: ProtocCommand, line: str, logger: Optional[logging.Logger] = None
) -> Optional[Failure]:
    """Interpret one line of protoc output.

    Returns None for lines that are deliberately ignored. Lines that cannot be
    interpreted become a failure carrying the whole line as its message.
    """
    logger = logger if logger is not None else _LOGGER
    files = command.proto_files

    match = _PLUGIN_FAILED.search(line)
    if match:
        return Failure(
            message=f"protoc-gen-{match[1]} failed with status code {match[2]}."
        )
    match = _OTHER_PLUGIN_FAILURE.search(line)
    if match:
        return Failure(message=f"protoc-gen-{match[1]}: {match[2]}")

    parts = line.split(":")
    if len(parts) != 4:
        match = _NO_SYNTAX_SPECIFIED.search(line)
        if match:
            return Failure(
                filename=best_file_path(files, match[1]),
                message=(
                    "No syntax specified. Please use 'syntax = \"proto2\";' or "
                    "'syntax = \"proto3\";' to specify a syntax version."
                ),
            )
        match = _EXTRA_IMPORT.search(line)
        if match:
            if _allow_unused_imports(command):
                return None
            return Failure(
                filename=best_file_path(files, match[1]),
                message=f'Import "{match[2]}" was not used.',
            )
        match = _FILE_NOT_FOUND.search(line)
        if match:
            return Failure(message=f'Import "{match[1]}" was not found.')
        match = _EXPLICIT_DEFAULT_VALUES_PROTO3.search(line)
        if match:
            return Failure(
                filename=best_file_path(files, match[1]),
                message="Explicit default values are not allowed in proto3.",
            )
        if _IMPORT_NOT_FOUND.search(line):
            return None
        match = _JSON_CAMEL_CASE.search(line)
        if match:
            return Failure(filename=best_file_path(files, match[1]), message=match[2])
        match = _IS_NOT_DEFINED.search(line)
        if match:
            return Failure(
                filename=best_file_path(files, match[1]),
                message=f"{match[2]} is not defined.",
            )
        match = _SEEMS_TO_BE_DEFINED.search(line)
        if match:
            return Failure(filename=best_file_path(files, match[1]), message=match[2])
        match = _OPTION_VALUE.search(line)
        if match:
            return Failure(
                filename=best_file_path(files, match[1]),
                message=f"Error while parsing option value for {match[2]}",
            )
        match = _PROGRAM_NOT_FOUND.search(line)
        if match:
            return Failure(
                message=f"protoc-gen-{match[1]} not found or is not executable."
            )
        match = _FIRST_ENUM_VALUE_ZERO.search(line)
        if match:
            return Failure(
                filename=best_file_path(files, match[1]),
                message="The first enum value must be zero in proto3.",
            )
        return _uninterpreted(line, logger)

    line_number = _atoi(parts[1])
    if line_number is None:
        return _uninterpreted(line, logger)
    column = _atoi(parts[2])
    if column is None:
        return _uninterpreted(line, logger)
    message = parts[3].strip()
    if not message:
        return _uninterpreted(line, logger)
    return Failure(
        filename=best_file_path(files, parts[0]),
        line=line_number,
        column=column,
        message=message,
    )


def best_file_path(proto_files: Sequence[Any], match: str) -> str:
    """Return the display path of the one file ending in match, else match itself."""
    try:
        return display_file_path(proto_files, match)
    except ValueError:
        return match


def display_file_path(proto_files: Sequence[Any], match: str) -> str:
    """Return the display path of the single file whose display path ends in match.

    Raises ValueError if no file or more than one file matches.
    """
    matching = ""
    for proto_file in proto_files:
        if proto_file.display_path.endswith(match):
            if matching:
                raise ValueError(f"duplicate matching file: {matching}")
            matching = proto_file.display_path
    if not matching:
        raise ValueError(f"no matching file for {match}")
    return matching