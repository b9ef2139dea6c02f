import pytest

from quarrysim.heightfield import (
    SebMapDef,
    SebRock,
    heightfield_to_trimesh,
    to_mapdef_alternative,
)
from quarrysim.rocks import RockData


def _cross_z(a, b, c):
    return (b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0])


@pytest.mark.parametrize("nrows,ncols", [(2, 2), (3, 4), (5, 2)])
def test_trimesh_counts_and_indices(nrows, ncols):
    heights = [float(k) for k in range(nrows * ncols)]
    vertices, indices = heightfield_to_trimesh(heights, nrows, ncols, (1.0, 1.0, 1.0))
    assert len(vertices) == nrows * ncols
    assert len(indices) == 2 * (nrows - 1) * (ncols - 1)
    assert all(0 <= i < len(vertices) for tri in indices for i in tri)
    assert all(len(set(tri)) == 3 for tri in indices)


def test_trimesh_is_centred_and_scaled():
    heights = [0.5, 1.5, 2.5, 3.5, 4.5, 5.5]
    vertices, _ = heightfield_to_trimesh(heights, 2, 3, (4.0, 2.0, 6.0))
    xs = [v[0] for v in vertices]
    ys = [v[1] for v in vertices]
    zs = [v[2] for v in vertices]
    assert min(xs) == pytest.approx(-2.0) and max(xs) == pytest.approx(2.0)
    assert min(zs) == pytest.approx(-3.0) and max(zs) == pytest.approx(3.0)
    assert sorted(ys) == pytest.approx(sorted(h * 2.0 for h in heights))


def test_trimesh_column_major_layout():
    heights = [10.0, 20.0, 30.0, 40.0]
    vertices, _ = heightfield_to_trimesh(heights, 2, 2, (1.0, 1.0, 1.0))
    # Vertex (row 0, col 1) is stored at heights[0 + 1 * 2].
    assert vertices[1][1] == heights[2]
    assert vertices[2][1] == heights[1]


@pytest.mark.parametrize("nrows,ncols", [(1, 3), (3, 1), (0, 0)])
def test_trimesh_rejects_degenerate_grid(nrows, ncols):
    with pytest.raises(ValueError):
        heightfield_to_trimesh([0.0] * (nrows * ncols), nrows, ncols, (1.0, 1.0, 1.0))


def test_trimesh_rejects_wrong_length():
    with pytest.raises(ValueError):
        heightfield_to_trimesh([0.0] * 5, 2, 3, (1.0, 1.0, 1.0))


def test_mapdef_rocks_keep_translation_with_unit_size():
    rocks = [RockData((1.0, 2.0, 3.0), 7), RockData((-1.0, 0.0, 4.5), 8)]
    mapdef = to_mapdef_alternative(rocks, [0.0] * 4, (2, 2))
    assert mapdef.rocks == [
        SebRock(translation=(1.0, 2.0, 3.0), size=(1.0, 1.0, 1.0)),
        SebRock(translation=(-1.0, 0.0, 4.5), size=(1.0, 1.0, 1.0)),
    ]


def test_mapdef_floor_places_each_sample():
    dim_x, dim_y = 4, 3
    height_map = [float(k) * 0.25 for k in range(dim_x * dim_y)]
    mapdef = to_mapdef_alternative([], height_map, (dim_x, dim_y))
    by_height = {v[2]: v for v in mapdef.floor_vtx}
    assert len(by_height) == dim_x * dim_y
    for j in range(dim_y):
        for i in range(dim_x):
            x, y, _ = by_height[height_map[i + j * dim_x]]
            assert x == pytest.approx(i * dim_x / (dim_x - 1))
            assert y == pytest.approx(j * dim_y / (dim_y - 1))


def test_mapdef_floor_covers_grid_area():
    dim_x, dim_y = 5, 3
    mapdef = to_mapdef_alternative([], [1.0] * (dim_x * dim_y), (dim_x, dim_y))
    areas = [
        _cross_z(*(mapdef.floor_vtx[i] for i in tri)) / 2.0 for tri in mapdef.floor_idx
    ]
    assert all(abs(area) > 0 for area in areas)
    assert sum(abs(area) for area in areas) == pytest.approx(dim_x * dim_y)
    assert all(v[2] == 1.0 for v in mapdef.floor_vtx)


def test_mapdef_defaults_are_empty():
    mapdef = SebMapDef()
    assert (mapdef.rocks, mapdef.floor_vtx, mapdef.floor_idx) == ([], [], [])


def test_mapdef_rejects_mismatched_heightmap():
    with pytest.raises(ValueError):
        to_mapdef_alternative([], [0.0] * 5, (2, 2))