import logging

import numpy as np
import pytest

from sliceview import (
    ALL,
    BroadcastError,
    DenseArray,
    ExecutionConfig,
    Keep,
    Range,
    assert_compatible_shape,
    assign,
    broadcastable,
    is_batch_eligible,
    noalias,
    view,
)
from tests._arrays import arange_array

ASSIGN_LOGGER = "sliceview.core.assign"


def _strategies(caplog):
    return [
        record.getMessage().split("strategy=")[1].split(",")[0]
        for record in caplog.records
        if record.name == ASSIGN_LOGGER
    ]


def test_fill(cube):
    v = view(cube, Range(0, 2), 1, Range(1, 4))
    v.fill(4)
    expected = np.arange(1, 25).reshape(2, 3, 4)
    expected[0:2, 1, 1:4] = 4
    np.testing.assert_array_equal(np.asarray(cube), expected)


def test_copy_between_views(layout):
    a = arange_array((3, 4), layout=layout)
    v1 = view(a, 1, Range(0, 3))
    v2 = view(a, 2, Range(1, 4))
    v2[...] = v1
    assert [a.at(2, k) for k in range(1, 4)] == [5, 6, 7]


def test_broadcast_from_smaller_source(grid):
    view(grid, Range(0, 2))[...] = [10, 20, 30, 40]
    np.testing.assert_array_equal(np.asarray(grid)[:2], [[10, 20, 30, 40]] * 2)
    np.testing.assert_array_equal(np.asarray(grid)[2], [9, 10, 11, 12])


def test_incompatible_shape():
    a = DenseArray(np.zeros((4, 3, 2)))
    b = np.ones((2, 3, 4))
    v = view(a, ALL)
    assert not broadcastable(v.shape, b.shape)
    assert not broadcastable(b.shape, v.shape)
    with pytest.raises(BroadcastError):
        assert_compatible_shape(b.shape, v.shape)
    with pytest.raises(BroadcastError):
        assert_compatible_shape(v.shape, b.shape)
    with pytest.raises(BroadcastError):
        v[...] = b
    with pytest.raises(BroadcastError):
        noalias(v)[...] = b
    assert not np.asarray(a).any()


def test_source_larger_than_target_is_rejected(grid):
    target = view(grid, 0)
    assert broadcastable(target.shape, grid.shape)
    with pytest.raises(BroadcastError) as info:
        target[...] = grid
    assert info.value.source_shape == (3, 4)
    assert info.value.target_shape == (4,)
    np.testing.assert_array_equal(np.asarray(grid), np.arange(1, 13).reshape(3, 4))


def test_overlapping_assignment_is_alias_safe(grid):
    view(grid, Range(1, 3))[...] = view(grid, Range(0, 2))
    np.testing.assert_array_equal(
        np.asarray(grid),
        [[1, 2, 3, 4], [1, 2, 3, 4], [5, 6, 7, 8]],
    )


def test_noalias_non_overlapping(grid):
    noalias(view(grid, 2))[...] = view(grid, 0)
    np.testing.assert_array_equal(np.asarray(grid)[2], [1, 2, 3, 4])


def test_noalias_streams_in_traversal_order(grid, caplog):
    with caplog.at_level(logging.DEBUG, logger=ASSIGN_LOGGER):
        view(grid, Range(1, 3)).assign(view(grid, Range(0, 2)), alias_safe=False)
    assert _strategies(caplog) == ["stream"]
    # row 1 is overwritten before it is read
    np.testing.assert_array_equal(np.asarray(grid)[2], [1, 2, 3, 4])


def test_noalias_rejects_partial_keys(grid):
    with pytest.raises(TypeError):
        noalias(view(grid, 0))[0] = 1


def test_mixed_dtypes():
    source = DenseArray(np.ones((5, 4, 4, 3), dtype=np.uint8))
    target = DenseArray(np.full((5, 4, 4, 3), 2.0))
    for i in range(5):
        view(target, i)[...] = view(source, i)
    assert target.at(0, 0, 0, 0) == 1.0
    assert target.dtype == np.float64
    np.testing.assert_array_equal(np.asarray(target), 1.0)


def test_noalias_whole_block_writes():
    a = DenseArray(np.arange(60, dtype=float).reshape(3, 4, 5))
    b = np.arange(20, dtype=float).reshape(4, 5) + 100
    noalias(view(a, 1, ALL, ALL))[...] = b
    noalias(view(a, 2, ALL, ALL))[...] = view(a, 0, ALL, ALL)
    np.testing.assert_array_equal(np.asarray(a)[1], b)
    np.testing.assert_array_equal(np.asarray(a)[2], np.arange(20, dtype=float).reshape(4, 5))


def test_assign_strategies(caplog):
    a = DenseArray(np.zeros((4, 4)))
    with caplog.at_level(logging.DEBUG, logger=ASSIGN_LOGGER):
        view(a, 1)[...] = 1.0
        view(a, ALL, 1)[...] = 2.0
        view(a, Keep(0, 3))[...] = 3.0
        view(a, 1).assign(4.0, config=ExecutionConfig(contiguous_fast_path=False))
    assert _strategies(caplog) == ["contiguous", "gather", "gather", "gather"]
    expected = np.zeros((4, 4))
    expected[:, 1] = 2.0
    expected[[0, 3]] = 3.0
    expected[1] = 4.0
    np.testing.assert_array_equal(np.asarray(a), expected)


def test_config_alias_safe_default_is_used(grid, caplog):
    cfg = ExecutionConfig(alias_safe=False)
    with caplog.at_level(logging.DEBUG, logger=ASSIGN_LOGGER):
        assign(view(grid, 2), view(grid, 0), config=cfg)
        assign(view(grid, 1), view(grid, 0), alias_safe=True, config=cfg)
    assert _strategies(caplog) == ["stream", "contiguous"]


def test_column_major_contiguous_write():
    a = arange_array((3, 4), layout="column_major")
    v = view(a, ALL, Range(1, 3))
    assert v.kind.value == "affine_contiguous"
    v[...] = [[10, 20], [30, 40], [50, 60]]
    np.testing.assert_array_equal(
        np.asarray(a),
        [[1, 10, 20, 4], [5, 30, 40, 8], [9, 50, 60, 12]],
    )


def test_zero_size_target_is_a_no_op(grid):
    view(grid, Range(1, 1))[...] = 5
    np.testing.assert_array_equal(np.asarray(grid), np.arange(1, 13).reshape(3, 4))


def test_dense_array_whole_assignment(grid):
    grid[...] = 0
    assert not np.asarray(grid).any()
    grid.fill(3)
    assert set(np.asarray(grid).ravel()) == {3}


def test_batch_eligibility():
    a = DenseArray(np.zeros((3, 4, 5)))
    assert is_batch_eligible(view(a, 1, ALL, ALL))
    assert is_batch_eligible(view(a, 1, 2, 3))
    assert not is_batch_eligible(view(a, ALL, 0))
    assert not is_batch_eligible(view(a, Keep(0, 2)))
    assert not is_batch_eligible(view(a, 1), source_dtype=np.float32)
    assert is_batch_eligible(view(a, 1), source_dtype=np.float64)
    assert not is_batch_eligible(view(a, 1), config=ExecutionConfig(batch_width=12))

    objects = DenseArray(np.empty((2, 2), dtype=object))
    assert not is_batch_eligible(view(objects, 0))
