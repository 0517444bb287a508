import pytest

from tests._arrays import arange_array


@pytest.fixture(params=["row_major", "column_major"])
def layout(request):
    return request.param


@pytest.fixture
def grid():
    """(3, 4) holding 1..12."""
    return arange_array((3, 4))


@pytest.fixture
def cube():
    """(2, 3, 4) holding 1..24."""
    return arange_array((2, 3, 4))


@pytest.fixture
def keep_cube():
    """(3, 2, 4) holding 1..24."""
    return arange_array((3, 2, 4))
