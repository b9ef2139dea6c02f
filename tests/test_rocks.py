import math

import pytest

from quarrysim.rocks import (
    BrokenRock,
    RockData,
    UnbrokenRock,
    generate_heightmap,
    load_all_rocks,
    load_broken_rocks,
    load_unbroken_rocks,
    min_max_bounds,
)


def _write(path, lines):
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def _block(x, y, z, dx, dy, dz, ident=0):
    return UnbrokenRock(x=x, y=y, z=z, dx=dx, dy=dy, dz=dz, id=ident)


def test_load_broken_rocks_reads_named_columns(tmp_path):
    path = _write(
        tmp_path / "broken.csv",
        ["id,insitu_model_guid,x,y,z", "3,abc,1.5,2.5,-3", "4,def,0,0,7.25"],
    )
    rocks = load_broken_rocks(path)
    assert rocks == [
        BrokenRock(x=1.5, y=2.5, z=-3.0, id=3),
        BrokenRock(x=0.0, y=0.0, z=7.25, id=4),
    ]


def test_load_broken_rocks_empty_file_gives_no_records(tmp_path):
    path = _write(tmp_path / "broken.csv", ["x,y,z,id"])
    assert load_broken_rocks(path) == []


def test_load_broken_rocks_missing_column(tmp_path):
    path = _write(tmp_path / "broken.csv", ["x,y,id", "1,2,3"])
    with pytest.raises(ValueError, match="z"):
        load_broken_rocks(path)


@pytest.mark.parametrize("bad_id", ["-1", "1.0", "abc", "4294967296"])
def test_load_broken_rocks_rejects_invalid_ids(tmp_path, bad_id):
    path = _write(tmp_path / "broken.csv", ["x,y,z,id", f"1,2,3,{bad_id}"])
    with pytest.raises(ValueError):
        load_broken_rocks(path)


def test_load_broken_rocks_rejects_invalid_float(tmp_path):
    path = _write(tmp_path / "broken.csv", ["x,y,z,id", "1,two,3,4"])
    with pytest.raises(ValueError, match="y"):
        load_broken_rocks(path)


def test_load_broken_rocks_rejects_ragged_rows(tmp_path):
    path = _write(tmp_path / "broken.csv", ["x,y,z,id", "1,2,3,4,5"])
    with pytest.raises(ValueError):
        load_broken_rocks(path)


def test_load_broken_rocks_missing_file(tmp_path):
    with pytest.raises(OSError):
        load_broken_rocks(tmp_path / "absent.csv")


def test_load_unbroken_rocks_reads_all_fields(tmp_path):
    path = _write(
        tmp_path / "unbroken.csv",
        ["x,y,z,dx,dy,dz,Unbroken,id", "1,2,3,0.5,0.25,2,1.0,42"],
    )
    assert load_unbroken_rocks(path) == [
        UnbrokenRock(x=1.0, y=2.0, z=3.0, dx=0.5, dy=0.25, dz=2.0, id=42)
    ]


def test_load_unbroken_rocks_missing_extent(tmp_path):
    path = _write(tmp_path / "unbroken.csv", ["x,y,z,dx,dy,id", "1,2,3,1,1,1"])
    with pytest.raises(ValueError, match="dz"):
        load_unbroken_rocks(path)


def test_generate_heightmap_single_block_fills_everything():
    heights, dim = generate_heightmap([_block(0, 0, 0, 2, 2, 2)], 1.0)
    assert dim == (3, 3)
    assert heights == [1.0] * 9


def test_generate_heightmap_two_blocks_leave_gap_at_floor():
    blocks = [
        _block(0.5, 0.5, 0.5, 1, 1, 1),
        _block(3.5, 0.5, 1.0, 1, 1, 2),
    ]
    heights, dim = generate_heightmap(blocks, 1.0)
    assert dim == (5, 2)
    assert heights == [1.0, 1.0, 0.0, 2.0, 2.0, 1.0, 1.0, 0.0, 2.0, 2.0]


def test_generate_heightmap_finer_sampling_grows_grid():
    coarse_heights, coarse_dim = generate_heightmap([_block(0, 0, 0, 2, 2, 2)], 1.0)
    fine_heights, fine_dim = generate_heightmap([_block(0, 0, 0, 2, 2, 2)], 0.5)
    assert fine_dim[0] > coarse_dim[0] and fine_dim[1] > coarse_dim[1]
    assert len(fine_heights) == fine_dim[0] * fine_dim[1]
    assert set(fine_heights) == set(coarse_heights)


def test_generate_heightmap_heights_are_bounded_by_blocks():
    blocks = [
        _block(1, 1, 0, 1, 2, 1),
        _block(4, 2, 3, 2, 1, 4),
        _block(2, 5, -1, 1, 1, 1),
    ]
    heights, (dim_x, dim_y) = generate_heightmap(blocks, 1.0)
    bottoms = [b.z - b.dz / 2 for b in blocks]
    tops = [b.z + b.dz / 2 for b in blocks]
    assert len(heights) == dim_x * dim_y
    assert min(heights) >= min(bottoms)
    assert max(heights) == max(tops)


def test_generate_heightmap_empty_input():
    heights, dim = generate_heightmap([], 1.0)
    assert dim == (1, 1)
    assert heights == [math.inf]


def test_min_max_bounds_uses_centres():
    rocks = [_block(1, 5, -2, 9, 9, 9), _block(-3, 2, 4, 1, 1, 1)]
    low, high = min_max_bounds(rocks)
    assert low == (-3, 2, -2)
    assert high == (1, 5, 4)


def test_min_max_bounds_empty():
    low, high = min_max_bounds([])
    assert all(math.isinf(v) and v > 0 for v in low)
    assert all(math.isinf(v) and v < 0 for v in high)


def test_load_all_rocks_recentres(tmp_path):
    unbroken_path = _write(
        tmp_path / "unbroken.csv",
        ["x,y,z,dx,dy,dz,id", "10,3,5,1,1,1,1", "20,4,7,1,1,1,2"],
    )
    broken_path = _write(
        tmp_path / "broken.csv", ["x,y,z,id", "11,5,6,9", "15,3.5,8,10"]
    )
    original_unbroken = load_unbroken_rocks(unbroken_path)
    original_broken = load_broken_rocks(broken_path)
    low, _ = min_max_bounds(original_unbroken)

    rocks, unbroken = load_all_rocks(unbroken_path, broken_path)

    assert min(rock.z for rock in unbroken) == 0.0
    assert [(r.x, r.y, r.id) for r in unbroken] == [
        (r.x, r.y, r.id) for r in original_unbroken
    ]
    assert rocks == [
        RockData(
            translation=(b.x - low[0], b.y - low[1], b.z - low[2]), metadata=b.id
        )
        for b in original_broken
    ]


def test_load_all_rocks_propagates_missing_file(tmp_path):
    unbroken_path = _write(tmp_path / "unbroken.csv", ["x,y,z,dx,dy,dz,id"])
    with pytest.raises(OSError):
        load_all_rocks(unbroken_path, tmp_path / "absent.csv")