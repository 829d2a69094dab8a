"""Reading and writing of sectioned ``key = value`` configuration files."""

from __future__ import annotations

from typing import Mapping, Tuple, Union

DEFAULT_SECTION = "Application Options"

Value = Union[str, Tuple[str, str]]

_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\t": "\\t", "\r": "\\r"}
_UNESCAPES = {"\\": "\\", '"': '"', "n": "\n", "t": "\t", "r": "\r"}


class IniError(ValueError):
    """Raised when configuration text or data cannot be handled."""


def _needs_quotes(value: str) -> bool:
    return (
        value != value.strip()
        or value.startswith('"')
        or any(char in value for char in "\n\r\t")
    )


def _quote(value: str) -> str:
    return '"' + "".join(_ESCAPES.get(char, char) for char in value) + '"'


def _unquote(raw: str, line_number: int) -> str:
    if len(raw) < 2 or not raw.endswith('"'):
        raise IniError(f"line {line_number}: unterminated quoted value")
    body = raw[1:-1]
    result = []
    chars = iter(body)
    for char in chars:
        if char == '"':
            raise IniError(f"line {line_number}: unescaped quote in value")
        if char != "\\":
            result.append(char)
            continue
        escaped = next(chars, None)
        if escaped not in _UNESCAPES:
            raise IniError(f"line {line_number}: invalid escape in value")
        result.append(_UNESCAPES[escaped])
    return "".join(result)


def dump_sections(sections: Mapping[str, Mapping[str, Value]]) -> str:
    """Render sections as text.

    Each option value is either a string or a ``(value, comment)`` pair; the
    comment is written on the line above the option.
    """
    blocks = []
    for name, options in sections.items():
        if not name or any(char in name for char in "[]\n\r"):
            raise IniError(f"invalid section name {name!r}")
        lines = [f"[{name}]"]
        for key, entry in options.items():
            if not key or key != key.strip() or any(char in key for char in "=\n\r;#["):
                raise IniError(f"invalid option name {key!r}")
            value, comment = entry if isinstance(entry, tuple) else (entry, None)
            if comment:
                lines.extend(f"; {part}" for part in comment.splitlines())
            rendered = _quote(value) if _needs_quotes(value) else value
            lines.append(f"{key} = {rendered}" if rendered else f"{key} =")
        blocks.append("\n".join(lines) + "\n")
    return "\n".join(blocks)


def parse_sections(text: str) -> dict[str, dict[str, str]]:
    """Parse text into a mapping of section name to options.

    Options before the first section header belong to DEFAULT_SECTION; a
    repeated option keeps its last value.
    """
    sections: dict[str, dict[str, str]] = {}
    current = DEFAULT_SECTION
    for line_number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line[0] in ";#":
            continue
        if line.startswith("["):
            if not line.endswith("]") or len(line) < 3:
                raise IniError(f"line {line_number}: malformed section header {line!r}")
            current = line[1:-1].strip()
            if not current:
                raise IniError(f"line {line_number}: empty section name")
            sections.setdefault(current, {})
            continue
        key, separator, value = line.partition("=")
        key = key.strip()
        if not separator or not key:
            raise IniError(f"line {line_number}: malformed key=value ({line})")
        value = value.strip()
        if value.startswith('"'):
            value = _unquote(value, line_number)
        sections.setdefault(current, {})[key] = value
    return sections