"""Rock block records loaded from CSV exports, and heightmaps built from them."""

from __future__ import annotations

import csv
import math
import os
import re
from dataclasses import dataclass, fields, replace
from typing import Callable, Iterable, Sequence, TypeVar, Union

Vec3 = tuple[float, float, float]
PathLike = Union[str, "os.PathLike[str]"]

_U32_MAX = 2**32 - 1
_INTEGER = re.compile(r"\+?[0-9]+")

_Record = TypeVar("_Record")


@dataclass(frozen=True)
class BrokenRock:
    """A rock fragment produced by blasting, located by its centre."""

    x: float
    y: float
    z: float
    id: int


@dataclass(frozen=True)
class UnbrokenRock:
    """An in-situ rock block: its centre and its extents along each axis."""

    x: float
    y: float
    z: float
    dx: float
    dy: float
    dz: float
    id: int


@dataclass
class RockData:
    """A rock placed on the map, with an identifier carried as metadata."""

    translation: Vec3
    metadata: int


def _parse_float(text: str, column: str, line: int) -> float:
    if text != text.strip() or "_" in text:
        raise ValueError(f"line {line}: column {column!r}: invalid float {text!r}")
    try:
        return float(text)
    except ValueError:
        raise ValueError(
            f"line {line}: column {column!r}: invalid float {text!r}"
        ) from None


def _parse_u32(text: str, column: str, line: int) -> int:
    if not _INTEGER.fullmatch(text):
        raise ValueError(f"line {line}: column {column!r}: invalid integer {text!r}")
    value = int(text)
    if value > _U32_MAX:
        raise ValueError(f"line {line}: column {column!r}: {text!r} is out of range")
    return value


def _read_records(path: PathLike, record_type: Callable[..., _Record]) -> list[_Record]:
    names = [f.name for f in fields(record_type)]  # type: ignore[arg-type]
    records: list[_Record] = []
    with open(path, newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        for row in reader:
            line = reader.line_num
            header = reader.fieldnames or []
            if None in row or any(value is None for value in row.values()):
                raise ValueError(
                    f"{os.fspath(path)}:{line}: record does not have "
                    f"{len(header)} fields like the header"
                )
            missing = [name for name in names if name not in row]
            if missing:
                raise ValueError(
                    f"{os.fspath(path)}:{line}: missing field(s): {', '.join(missing)}"
                )
            values = {
                name: (_parse_u32 if name == "id" else _parse_float)(row[name], name, line)
                for name in names
            }
            records.append(record_type(**values))
    return records


def load_broken_rocks(path: PathLike) -> list[BrokenRock]:
    """Read broken rocks from a CSV file with columns x, y, z and id."""
    return _read_records(path, BrokenRock)


def load_unbroken_rocks(path: PathLike) -> list[UnbrokenRock]:
    """Read unbroken blocks from a CSV file with columns x, y, z, dx, dy, dz and id."""
    return _read_records(path, UnbrokenRock)


def _to_u32(value: float) -> int:
    """Saturating conversion of a float to an unsigned 32-bit integer."""
    if math.isnan(value) or value <= 0:
        return 0
    if value >= _U32_MAX:
        return _U32_MAX
    return int(value)


def _ceil_u32(value: float) -> int:
    return _to_u32(math.ceil(value) if math.isfinite(value) else value)


def _floor_u32(value: float) -> int:
    return _to_u32(math.floor(value) if math.isfinite(value) else value)


def _component_min(points: Iterable[Vec3]) -> Vec3:
    axes = list(zip(*points))
    if not axes:
        return (math.inf, math.inf, math.inf)
    x, y, z = (min(axis) for axis in axes)
    return (x, y, z)


def _component_max(points: Iterable[Vec3]) -> Vec3:
    axes = list(zip(*points))
    if not axes:
        return (-math.inf, -math.inf, -math.inf)
    x, y, z = (max(axis) for axis in axes)
    return (x, y, z)


def generate_heightmap(
    blocks: Sequence[UnbrokenRock], sampling_interval: float
) -> tuple[list[float], tuple[int, int]]:
    """Return the heightmap and its dimensions (along x, along y).

    The heightmap is stored with x varying fastest: cell (i, j) is at
    index ``i + j * dim_x``. Cells not covered by any block hold the lowest
    block bottom.
    """
    boxes = [
        (
            (b.x - b.dx / 2.0, b.y - b.dy / 2.0, b.z - b.dz / 2.0),
            (b.x + b.dx / 2.0, b.y + b.dy / 2.0, b.z + b.dz / 2.0),
        )
        for b in blocks
    ]
    mins = _component_min(low for low, _ in boxes)
    maxs = _component_max(high for _, high in boxes)

    dim_x = _ceil_u32((maxs[0] - mins[0]) / sampling_interval) + 1
    dim_y = _ceil_u32((maxs[1] - mins[1]) / sampling_interval) + 1

    heights = [mins[2]] * (dim_x * dim_y)
    for low, high in boxes:
        i_min = _floor_u32((low[0] - mins[0]) / sampling_interval)
        j_min = _floor_u32((low[1] - mins[1]) / sampling_interval)
        i_max = _ceil_u32((high[0] - mins[0]) / sampling_interval)
        j_max = _ceil_u32((high[1] - mins[1]) / sampling_interval)
        for j in range(j_min, j_max + 1):
            for i in range(i_min, i_max + 1):
                index = i + j * dim_x
                heights[index] = max(heights[index], high[2])
    return heights, (dim_x, dim_y)


def min_max_bounds(unbroken_rocks: Iterable[UnbrokenRock]) -> tuple[Vec3, Vec3]:
    """Return the component-wise minimum and maximum of the rock centres."""
    centres = [(rock.x, rock.y, rock.z) for rock in unbroken_rocks]
    return _component_min(centres), _component_max(centres)


def load_all_rocks(
    unbroken_rocks_path: PathLike, broken_rocks_path: PathLike
) -> tuple[list[RockData], list[UnbrokenRock]]:
    """Load both rock files and shift them so the unbroken model starts at z = 0.

    Broken rocks are moved by the full minimum corner of the unbroken rock
    centres; unbroken rocks are moved along z only.
    """
    broken = load_broken_rocks(broken_rocks_path)
    unbroken = load_unbroken_rocks(unbroken_rocks_path)

    low, _ = min_max_bounds(unbroken)
    shifted_unbroken = [replace(rock, z=rock.z - low[2]) for rock in unbroken]
    rocks = [
        RockData(
            translation=(rock.x - low[0], rock.y - low[1], rock.z - low[2]),
            metadata=rock.id,
        )
        for rock in broken
    ]
    return rocks, shifted_unbroken