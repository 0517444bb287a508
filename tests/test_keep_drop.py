import numpy as np
import pytest

from sliceview import ALL, DenseArray, Drop, Keep, Layout, OutOfBoundsError, Range, ViewKind, view

EXPECTED_CORNERS = [[[9, 12], [13, 16]]]


@pytest.mark.parametrize(
    "selectors",
    [
        pytest.param((Keep(1), Keep(0, 1), Keep(0, 3)), id="keep"),
        pytest.param((Keep(1), ALL, Range(0, None, 3)), id="keep-range"),
        pytest.param((Keep(-2), Keep(0, -1), Keep(0, -1)), id="keep-negative"),
        pytest.param((Drop(0, 2), Keep(0, 1), Drop(1, 2)), id="drop"),
        pytest.param((Drop(-3, -1), Keep(0, 1), Drop(-3, -2)), id="drop-negative"),
        pytest.param(([1], [0, 1], [0, 3]), id="list-shorthand"),
    ],
)
def test_corner_selection(keep_cube, selectors):
    v = view(keep_cube, *selectors)
    assert v.shape == (1, 2, 2)
    np.testing.assert_array_equal(np.asarray(v), EXPECTED_CORNERS)


def test_keep_repeats(keep_cube):
    v = view(keep_cube, Keep(1), Keep(1, 1, 1, 1), Keep(0, 3))
    assert v.shape == (1, 4, 2)
    np.testing.assert_array_equal(np.asarray(v), [[[13, 16]] * 4])

    v[0, 2, 1] = 1000
    assert keep_cube.at(1, 1, 3) == 1000


def test_keep_partial_index_writes(keep_cube):
    v = view(keep_cube, Keep(0, 2), Keep(0))
    np.testing.assert_array_equal(np.asarray(v), [[[1, 2, 3, 4]], [[17, 18, 19, 20]]])
    v[0, 0] = 123
    assert keep_cube.at(0, 0, 0) == 123
    v[1, 0] = 321
    assert keep_cube.at(2, 0, 0) == 321


def test_drop_single_positions(keep_cube):
    v = view(keep_cube, Drop(1), Drop(1))
    np.testing.assert_array_equal(np.asarray(v), [[[1, 2, 3, 4]], [[17, 18, 19, 20]]])


def test_list_indexed_views_have_no_strides(keep_cube):
    v = view(keep_cube, Keep(1), Keep(0, 1), Keep(0, 3))
    assert v.kind is ViewKind.LIST_INDEXED
    assert not v.is_affine
    assert v.strides is None
    assert v.layout is Layout.DYNAMIC


def test_keep_row_and_outer_columns():
    base = DenseArray(np.array([[1, 2, 3, 4], [9, 10, 11, 12], [5, 6, 7, 8]]))
    v = view(base, Keep(1), Keep(0, 3))
    assert v.shape == (1, 2)
    assert [v.at(0, 0), v.at(0, 1)] == [9, 12]


def test_range_over_list_axis(keep_cube):
    inner = view(keep_cube, ALL, ALL, Keep(3, 0, 1))
    outer = view(inner, ALL, ALL, Range(None, None, -1))
    expected = np.arange(1, 25).reshape(3, 2, 4)[:, :, [1, 0, 3]]
    np.testing.assert_array_equal(np.asarray(outer), expected)
    assert outer.kind is ViewKind.LIST_INDEXED


def test_keep_over_keep_composes_tables(keep_cube):
    inner = view(keep_cube, Keep(2, 0, 1))
    outer = view(inner, Keep(2, 2, 0))
    expected = np.arange(1, 25).reshape(3, 2, 4)[[1, 1, 2]]
    np.testing.assert_array_equal(np.asarray(outer), expected)
    assert outer.base_index((0, 1, 2)) == (1, 1, 2)


def test_empty_keep(keep_cube):
    v = view(keep_cube, Keep())
    assert v.shape == (0, 2, 4)
    assert list(v) == []


def test_drop_everything(keep_cube):
    v = view(keep_cube, ALL, Drop(0, 1))
    assert v.shape == (3, 0, 4)
    assert np.asarray(v).size == 0


@pytest.mark.parametrize("selector", [Keep(3), Keep(-4), Drop(3)])
def test_out_of_range_positions(keep_cube, selector):
    with pytest.raises(OutOfBoundsError):
        view(keep_cube, selector)


def test_keep_assign_scalar():
    arr = DenseArray(np.ones((10, 10), dtype=int))
    v = view(arr, Keep(0, -1), ALL)
    v[...] = 0
    result = np.asarray(arr)
    np.testing.assert_array_equal(result[[0, 9]], 0)
    np.testing.assert_array_equal(result[1:9], 1)
