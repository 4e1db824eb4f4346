"""String helpers for checking and converting identifier case styles."""

from __future__ import annotations

from collections.abc import Callable, Iterable

_DELIMITERS = frozenset("-_ \t\n\r")


def _is_lower(c: str) -> bool:
    return "a" <= c <= "z"


def _is_upper(c: str) -> bool:
    return "A" <= c <= "Z"


def _is_digit(c: str) -> bool:
    return "0" <= c <= "9"


def _is_letter(c: str) -> bool:
    return _is_lower(c) or _is_upper(c)


def _is_delimiter(c: str) -> bool:
    return c in _DELIMITERS


def is_capitalized(s: str) -> bool:
    """Return True if s is non-empty and starts with an ASCII uppercase letter."""
    return bool(s) and _is_upper(s[0])


def is_camel_case(s: str) -> bool:
    """Return True if s is non-empty and holds only ASCII letters and digits."""
    return bool(s) and all(_is_letter(c) or _is_digit(c) for c in s)


def is_lower_snake_case(s: str) -> bool:
    """Return True if s holds only lowercase letters, digits and inner underscores."""
    if not s or s.startswith("_") or s.endswith("_"):
        return False
    return all(_is_lower(c) or _is_digit(c) or c == "_" for c in s)


def is_upper_snake_case(s: str) -> bool:
    """Return True if s holds only uppercase letters, digits and inner underscores."""
    if not s or s.startswith("_") or s.endswith("_"):
        return False
    return all(_is_upper(c) or _is_digit(c) or c == "_" for c in s)


def _to_snake(s: str) -> str:
    """Convert s, assumed to hold no spaces, to snake_case."""
    parts: list[str] = []
    last = len(s) - 1
    for i, c in enumerate(s):
        if (
            i > 0
            and _is_upper(c)
            and parts[-1][-1] != "_"
            and i < last
            and not _is_upper(s[i + 1])
        ):
            parts.append("_" + c)
        else:
            parts.append(c)
    return "".join(parts)


def to_upper_snake_case(s: str) -> str:
    """Convert s to UPPER_SNAKE_CASE."""
    return _to_snake(s).upper()


def to_upper_camel_case(s: str) -> str:
    """Convert s to UpperCamelCase.

    Any of '-', '_' or whitespace marks a word boundary. Uppercase letters
    stay uppercase, which keeps abbreviations intact.
    """
    parts: list[str] = []
    previous = ""
    for i, c in enumerate(s.strip()):
        if not _is_delimiter(c):
            if i == 0 or _is_delimiter(previous) or _is_upper(c):
                parts.append(c.upper())
            else:
                parts.append(c.lower())
        previous = c
    return "".join(parts)


def dedupe_sort(
    values: Iterable[str], modifier: Callable[[str], str] | None = None
) -> list[str]:
    """Return values without duplicates or empty strings, sorted.

    If modifier is given, it is applied to each element first.
    """
    seen: set[str] = set()
    for value in values:
        if not value:
            continue
        seen.add(modifier(value) if modifier is not None else value)
    return sorted(seen)


def intersection(one: Iterable[str], two: Iterable[str]) -> list[str]:
    """Return the sorted intersection of one and two, without empty strings."""
    return sorted((set(one) & set(two)) - {""})


def is_lowercase(s: str) -> bool:
    """Return True if s is non-empty and entirely lowercase."""
    return bool(s) and s.lower() == s


def is_uppercase(s: str) -> bool:
    """Return True if s is non-empty and entirely uppercase."""
    return bool(s) and s.upper() == s