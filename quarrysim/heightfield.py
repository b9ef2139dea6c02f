"""Triangulated floor meshes built from heightmaps."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .rocks import RockData

Vec3 = tuple[float, float, float]
Triangle = tuple[int, int, int]


@dataclass
class SebRock:
    """A rock in the alternative map format: a position and a box size."""

    translation: Vec3
    size: Vec3 = (1.0, 1.0, 1.0)


@dataclass
class SebMapDef:
    """Alternative map format: rocks plus an explicit floor triangle mesh."""

    rocks: list[SebRock] = field(default_factory=list)
    floor_vtx: list[Vec3] = field(default_factory=list)
    floor_idx: list[Triangle] = field(default_factory=list)


def heightfield_to_trimesh(
    heights: Sequence[float], nrows: int, ncols: int, scale: Vec3
) -> tuple[list[Vec3], list[Triangle]]:
    """Triangulate a heightfield centred on the origin.

    ``heights`` holds ``nrows * ncols`` samples in column-major order: the
    sample at (row, col) is ``heights[row + col * nrows]``. Columns run along
    x, rows along z, and heights along y; the grid spans one unit in x and z
    before scaling. Vertex (row, col) has index ``row * ncols + col``; each
    cell yields two triangles.
    """
    if nrows < 2 or ncols < 2:
        raise ValueError("a heightfield needs at least 2 rows and 2 columns")
    if len(heights) != nrows * ncols:
        raise ValueError(
            f"expected {nrows * ncols} heights for a {nrows}x{ncols} grid, "
            f"got {len(heights)}"
        )
    sx, sy, sz = scale
    vertices: list[Vec3] = [
        (
            (col / (ncols - 1) - 0.5) * sx,
            heights[row + col * nrows] * sy,
            (row / (nrows - 1) - 0.5) * sz,
        )
        for row in range(nrows)
        for col in range(ncols)
    ]
    indices: list[Triangle] = []
    for row in range(nrows - 1):
        for col in range(ncols - 1):
            p00 = row * ncols + col
            p01 = p00 + 1
            p10 = p00 + ncols
            p11 = p10 + 1
            indices.append((p00, p10, p11))
            indices.append((p00, p11, p01))
    return vertices, indices


def to_mapdef_alternative(
    rocks: Sequence[RockData],
    height_map: Sequence[float],
    height_map_dim: tuple[int, int],
) -> SebMapDef:
    """Build the alternative map definition from rocks and a heightmap.

    The heightmap uses the layout of ``generate_heightmap``. The floor is
    turned to a z-up frame with the grid spanning ``[0, dim_x]`` along x and
    ``[0, dim_y]`` along y, and heights along z.
    """
    dim_x, dim_y = height_map_dim
    vertices, indices = heightfield_to_trimesh(
        height_map, dim_x, dim_y, (float(dim_y), 1.0, float(dim_x))
    )
    # Quarter turns about y then x map (x, y, z) to (z, x, y).
    floor_vtx: list[Vec3] = [
        (z + dim_x / 2.0, x + dim_y / 2.0, y) for x, y, z in vertices
    ]
    return SebMapDef(
        rocks=[SebRock(translation=rock.translation) for rock in rocks],
        floor_vtx=floor_vtx,
        floor_idx=indices,
    )