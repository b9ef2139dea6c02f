"""Reading and writing accessory definitions as RON text."""

from __future__ import annotations

import math
import os
import re
from dataclasses import dataclass
from typing import Any, Union

from .accessory import (
    EXCAVATOR_PARTS,
    ExcavatorControls,
    ExcavatorDef,
    LookAtDef,
    RotationControlDef,
    TruckControls,
    TruckDef,
)

PathLike = Union[str, "os.PathLike[str]"]

_INDENT = "    "
_NUMBER = re.compile(r"[+-]?(?:inf|NaN|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_IDENT = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_ESCAPES = {'"': '"', "\\": "\\", "n": "\n", "t": "\t", "r": "\r", "0": "\0", "'": "'"}
_ROTATION_FIELDS = (
    "node_name",
    "axis",
    "min_max_angle",
    "default_angle",
    "sensitivity",
    "sensitivity_lerp_mult",
)


class DefLoadError(Exception):
    """A definition could not be read or did not parse."""


# --------------------------------------------------------------------------
# Writing


def _float(value: float) -> str:
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return repr(value)


def _string(text: str) -> str:
    parts = []
    for char in text:
        if char == '"':
            parts.append('\\"')
        elif char == "\\":
            parts.append("\\\\")
        elif char == "\n":
            parts.append("\\n")
        elif char == "\t":
            parts.append("\\t")
        elif char == "\r":
            parts.append("\\r")
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            parts.append(f"\\u{{{ord(char):x}}}")
        else:
            parts.append(char)
    return '"' + "".join(parts) + '"'


def _tuple(values: tuple[float, ...]) -> str:
    return "(" + ", ".join(_float(v) for v in values) + ")"


def _struct(items: list[tuple[str, str]], level: int) -> str:
    pad = _INDENT * (level + 1)
    lines = ["("]
    lines.extend(f"{pad}{name}: {text}," for name, text in items)
    lines.append(_INDENT * level + ")")
    return "\n".join(lines)


def _list(items: list[str], level: int) -> str:
    if not items:
        return "[]"
    pad = _INDENT * (level + 1)
    lines = ["["]
    lines.extend(f"{pad}{item}," for item in items)
    lines.append(_INDENT * level + "]")
    return "\n".join(lines)


def _rotation_ron(definition: RotationControlDef, level: int) -> str:
    if definition.min_max_angle is None:
        min_max = "None"
    else:
        min_max = f"Some({_tuple(definition.min_max_angle)})"
    return _struct(
        [
            ("node_name", _string(definition.node_name)),
            ("axis", _tuple(definition.axis)),
            ("min_max_angle", min_max),
            ("default_angle", _float(definition.default_angle)),
            ("sensitivity", _float(definition.sensitivity)),
            ("sensitivity_lerp_mult", _float(definition.sensitivity_lerp_mult)),
        ],
        level,
    )


def _look_at_ron(look_at: LookAtDef, level: int) -> str:
    return _struct(
        [
            ("looker", _string(look_at.looker)),
            ("target", _string(look_at.target)),
            ("both_ways", "true" if look_at.both_ways else "false"),
        ],
        level,
    )


def def_to_ron(definition: Union[ExcavatorDef, TruckDef]) -> str:
    """Serialize a definition as pretty-printed RON."""
    if isinstance(definition, ExcavatorDef):
        items = [
            (part, _rotation_ron(getattr(definition, part), 1))
            for part in EXCAVATOR_PARTS
        ]
        items.append(
            ("look_ats", _list([_look_at_ron(l, 2) for l in definition.look_ats], 1))
        )
        return _struct(items, 0)
    if isinstance(definition, TruckDef):
        return _struct([("main_dump", _rotation_ron(definition.main_dump, 1))], 0)
    raise TypeError(f"cannot serialize {type(definition).__name__}")


# --------------------------------------------------------------------------
# Parsing


@dataclass(frozen=True)
class _Some:
    value: Any


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def error(self, message: str) -> DefLoadError:
        line = self.text.count("\n", 0, self.pos) + 1
        column = self.pos - (self.text.rfind("\n", 0, self.pos) + 1) + 1
        return DefLoadError(f"{line}:{column}: {message}")

    def skip(self) -> None:
        text = self.text
        while self.pos < len(text):
            if text[self.pos].isspace():
                self.pos += 1
            elif text.startswith("//", self.pos):
                end = text.find("\n", self.pos)
                self.pos = len(text) if end < 0 else end + 1
            elif text.startswith("/*", self.pos):
                self.skip_block_comment()
            else:
                break

    def skip_block_comment(self) -> None:
        depth = 0
        while self.pos < len(self.text):
            if self.text.startswith("/*", self.pos):
                depth += 1
                self.pos += 2
            elif self.text.startswith("*/", self.pos):
                depth -= 1
                self.pos += 2
                if depth == 0:
                    return
            else:
                self.pos += 1
        raise self.error("unterminated block comment")

    def peek(self) -> str:
        self.skip()
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def expect(self, char: str) -> None:
        if self.peek() != char:
            found = self.peek() or "end of input"
            raise self.error(f"expected {char!r}, found {found!r}")
        self.pos += 1

    def ident(self) -> str:
        match = _IDENT.match(self.text, self.pos)
        if not match:
            raise self.error("expected an identifier")
        self.pos = match.end()
        return match.group()

    def document(self) -> Any:
        value = self.value()
        if self.peek():
            raise self.error("trailing characters after the value")
        return value

    def value(self) -> Any:
        char = self.peek()
        if char == "(":
            return self.paren()
        if char == "[":
            return self.sequence()
        if char == '"':
            return self.string()
        if char and (char in "+-." or char.isdigit()):
            return self.number()
        if char and (char.isalpha() or char == "_"):
            if _NUMBER.match(self.text, self.pos) and self.text.startswith(
                ("inf", "NaN"), self.pos
            ):
                end = _NUMBER.match(self.text, self.pos).end()
                if not _IDENT.match(self.text, end):
                    return self.number()
            name = self.ident()
            if name == "true":
                return True
            if name == "false":
                return False
            if name == "None":
                return None
            if name == "Some":
                self.expect("(")
                inner = self.value()
                if self.peek() == ",":
                    self.pos += 1
                self.expect(")")
                return _Some(inner)
            if self.peek() == "(":
                return self.paren()
            raise self.error(f"unexpected identifier {name!r}")
        if not char:
            raise self.error("unexpected end of input")
        raise self.error(f"unexpected character {char!r}")

    def number(self) -> Union[int, float]:
        match = _NUMBER.match(self.text, self.pos)
        if not match:
            raise self.error("invalid number")
        self.pos = match.end()
        text = match.group()
        if any(c in text for c in ".eE") or "inf" in text or "NaN" in text:
            return float(text)
        return int(text)

    def string(self) -> str:
        self.expect('"')
        parts: list[str] = []
        text = self.text
        while True:
            if self.pos >= len(text):
                raise self.error("unterminated string")
            char = text[self.pos]
            self.pos += 1
            if char == '"':
                return "".join(parts)
            if char != "\\":
                parts.append(char)
                continue
            if self.pos >= len(text):
                raise self.error("unterminated string")
            code = text[self.pos]
            self.pos += 1
            if code in _ESCAPES:
                parts.append(_ESCAPES[code])
            elif code == "u" and text.startswith("{", self.pos):
                end = text.find("}", self.pos)
                if end < 0:
                    raise self.error("unterminated unicode escape")
                parts.append(self.codepoint(text[self.pos + 1 : end]))
                self.pos = end + 1
            elif code == "x":
                parts.append(self.codepoint(text[self.pos : self.pos + 2]))
                self.pos += 2
            else:
                raise self.error(f"invalid escape '\\{code}'")

    def codepoint(self, digits: str) -> str:
        try:
            return chr(int(digits, 16))
        except ValueError:
            raise self.error(f"invalid escape digits {digits!r}") from None

    def paren(self) -> Any:
        self.expect("(")
        start = self.pos
        self.skip()
        is_struct = False
        if _IDENT.match(self.text, self.pos):
            self.ident()
            is_struct = self.peek() == ":"
        self.pos = start
        if is_struct:
            return self.struct_body()
        return tuple(self.items(")"))

    def struct_body(self) -> dict[str, Any]:
        fields: dict[str, Any] = {}
        while self.peek() != ")":
            self.skip()
            name = self.ident()
            if name in fields:
                raise self.error(f"duplicate field `{name}`")
            self.expect(":")
            fields[name] = self.value()
            if self.peek() == ",":
                self.pos += 1
            elif self.peek() != ")":
                raise self.error("expected ',' or ')'")
        self.pos += 1
        return fields

    def items(self, close: str) -> list[Any]:
        values: list[Any] = []
        while self.peek() != close:
            values.append(self.value())
            if self.peek() == ",":
                self.pos += 1
            elif self.peek() != close:
                raise self.error(f"expected ',' or {close!r}")
        self.pos += 1
        return values

    def sequence(self) -> list[Any]:
        self.expect("[")
        return self.items("]")


def _require_struct(value: Any, where: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise DefLoadError(f"{where}: expected a struct")
    return value


def _field(struct: dict[str, Any], name: str, where: str) -> Any:
    if name not in struct:
        raise DefLoadError(f"{where}: missing field `{name}`")
    return struct[name]


def _number(value: Any, where: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DefLoadError(f"{where}: expected a number")
    return float(value)


def _text(value: Any, where: str) -> str:
    if not isinstance(value, str):
        raise DefLoadError(f"{where}: expected a string")
    return value


def _bool(value: Any, where: str) -> bool:
    if not isinstance(value, bool):
        raise DefLoadError(f"{where}: expected a boolean")
    return value


def _vector(value: Any, size: int, where: str) -> tuple[float, ...]:
    if not isinstance(value, (tuple, list)) or len(value) != size:
        raise DefLoadError(f"{where}: expected {size} numbers")
    return tuple(_number(v, where) for v in value)


def _rotation(value: Any, where: str) -> RotationControlDef:
    struct = _require_struct(value, where)
    get = {name: struct.get(name) for name in _ROTATION_FIELDS}
    for name in _ROTATION_FIELDS:
        if name != "min_max_angle":
            _field(struct, name, where)
    min_max = get["min_max_angle"]
    if isinstance(min_max, _Some):
        min_max = min_max.value
    x, y, z = _vector(get["axis"], 3, f"{where}.axis")
    return RotationControlDef(
        node_name=_text(get["node_name"], f"{where}.node_name"),
        axis=(x, y, z),
        min_max_angle=(
            None
            if min_max is None
            else tuple(_vector(min_max, 2, f"{where}.min_max_angle"))  # type: ignore[arg-type]
        ),
        default_angle=_number(get["default_angle"], f"{where}.default_angle"),
        sensitivity=_number(get["sensitivity"], f"{where}.sensitivity"),
        sensitivity_lerp_mult=_number(
            get["sensitivity_lerp_mult"], f"{where}.sensitivity_lerp_mult"
        ),
    )


def _look_at(value: Any, where: str) -> LookAtDef:
    struct = _require_struct(value, where)
    return LookAtDef(
        looker=_text(_field(struct, "looker", where), f"{where}.looker"),
        target=_text(_field(struct, "target", where), f"{where}.target"),
        both_ways=_bool(_field(struct, "both_ways", where), f"{where}.both_ways"),
    )


def excavator_def_from_ron(text: str) -> ExcavatorDef:
    """Parse an excavator definition from RON text."""
    struct = _require_struct(_Parser(text).document(), "ExcavatorDef")
    parts = {
        part: _rotation(_field(struct, part, "ExcavatorDef"), part)
        for part in EXCAVATOR_PARTS
    }
    look_ats = _field(struct, "look_ats", "ExcavatorDef")
    if not isinstance(look_ats, list):
        raise DefLoadError("look_ats: expected a list")
    return ExcavatorDef(
        **parts,
        look_ats=tuple(
            _look_at(item, f"look_ats[{n}]") for n, item in enumerate(look_ats)
        ),
    )


def truck_def_from_ron(text: str) -> TruckDef:
    """Parse a truck definition from RON text."""
    struct = _require_struct(_Parser(text).document(), "TruckDef")
    return TruckDef(main_dump=_rotation(_field(struct, "main_dump", "TruckDef"), "main_dump"))


def save_def(definition: Union[ExcavatorDef, TruckDef], path: PathLike) -> None:
    """Write a definition to ``path`` as pretty-printed RON."""
    with open(path, "w", encoding="utf-8") as handle:
        handle.write(def_to_ron(definition))


def _read_text(path: PathLike) -> str:
    try:
        with open(path, "rb") as handle:
            data = handle.read()
    except OSError as exc:
        raise DefLoadError(f"{os.fspath(path)}: {exc}") from exc
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DefLoadError(f"{os.fspath(path)}: not valid UTF-8") from exc


def load_excavator_def(path: PathLike) -> ExcavatorDef:
    """Read an excavator definition from a RON file."""
    return excavator_def_from_ron(_read_text(path))


def load_truck_def(path: PathLike) -> TruckDef:
    """Read a truck definition from a RON file."""
    return truck_def_from_ron(_read_text(path))


def default_excavator_controls(definition: ExcavatorDef) -> ExcavatorControls:
    """Controls with every knob at the default angle of its part."""
    return ExcavatorControls(
        **{part: getattr(definition, part).get_default_knob() for part in EXCAVATOR_PARTS}
    )


def default_truck_controls(definition: TruckDef) -> TruckControls:
    """Controls with the dump at its default angle."""
    return TruckControls(main_dump=definition.main_dump.get_default_knob().current_value)