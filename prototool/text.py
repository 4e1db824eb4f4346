"""Failures positioned in text, and how they are printed and ordered."""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional, Protocol


class FailureField(enum.IntEnum):
    """A field of a Failure that can be printed."""

    FILENAME = 0
    LINE = 1
    COLUMN = 2
    ID = 3
    MESSAGE = 4

    def __str__(self) -> str:
        return self.name.lower()


DEFAULT_FAILURE_FIELDS: tuple[FailureField, ...] = (
    FailureField.FILENAME,
    FailureField.LINE,
    FailureField.COLUMN,
    FailureField.MESSAGE,
)

_STRING_TO_FAILURE_FIELD = {str(field): field for field in FailureField}


def parse_failure_field(s: str) -> FailureField:
    """Parse a FailureField from its case-insensitive name."""
    try:
        return _STRING_TO_FAILURE_FIELD[s.lower()]
    except KeyError:
        raise ValueError(f"could not parse {s} to a FailureField") from None


def parse_colon_separated_failure_fields(s: str) -> list[FailureField]:
    """Parse colon-separated FailureField names; empty input gives the defaults."""
    if not s:
        return list(DEFAULT_FAILURE_FIELDS)
    return [parse_failure_field(part) for part in s.split(":")]


class _TextStream(Protocol):
    def write(self, s: str) -> object: ...


def _position_text(value: int) -> str:
    text = str(value)
    return "1" if text == "0" else text


@dataclass
class Failure:
    """A failure with a position in text."""

    filename: str = ""
    line: int = 0
    column: int = 0
    id: str = ""
    message: str = ""

    def write(self, stream: _TextStream, *args: FailureField) -> None:
        """Write the failure as one line to stream, with the given fields in order."""
        fields = args or DEFAULT_FAILURE_FIELDS
        last = len(fields) - 1
        pieces: list[str] = []
        for i, field in enumerate(fields):
            print_colon = True
            if field == FailureField.FILENAME:
                pieces.append(self.filename or "<input>")
            elif field == FailureField.LINE:
                pieces.append(_position_text(self.line))
            elif field == FailureField.COLUMN:
                pieces.append(_position_text(self.column))
            elif field == FailureField.ID:
                if self.id:
                    pieces.append(self.id)
                else:
                    print_colon = False
            elif field == FailureField.MESSAGE:
                if self.message:
                    pieces.append(self.message)
                else:
                    print_colon = False
            else:
                raise ValueError(f"unknown FailureField: {field}")
            if print_colon and i != last:
                pieces.append(":")
        if pieces:
            stream.write("".join(pieces) + "\n")

    def __str__(self) -> str:
        prefix = (
            f"{self.filename or '<input>'}:"
            f"{_position_text(self.line)}:{_position_text(self.column)}:"
        )
        if self.id:
            prefix += self.id + " "
        return prefix + self.message


def new_failure(
    filename: str,
    line: int,
    column: int,
    failure_id: str,
    message_format: str,
    *args: object,
) -> Failure:
    """Return a new Failure whose message is message_format formatted with args."""
    message = message_format % args if args else message_format
    return Failure(
        filename=filename,
        line=line,
        column=column,
        id=failure_id,
        message=message,
    )


def _sort_key(failure: Optional[Failure]) -> tuple:
    if failure is None:
        return (0,)
    return (
        1,
        failure.filename,
        failure.line,
        failure.column,
        failure.id,
        failure.message,
    )


def sort_failures(failures: list[Optional[Failure]]) -> None:
    """Sort failures in place by filename, line, column, id and message; None first."""
    failures.sort(key=_sort_key)


def sorted_failures(failures: Iterable[Optional[Failure]]) -> list[Optional[Failure]]:
    """Return a new sorted list of failures."""
    result = list(failures)
    sort_failures(result)
    return result