import pytest

from sliceview import ExecutionConfig


def test_execution_config_normalization_handles_order_aliases_and_flags():
    cfg = ExecutionConfig(order="C", alias_safe=0, batch_width="64", contiguous_fast_path=1).normalized()
    assert cfg.order == "row_major"
    assert cfg.alias_safe is False
    assert cfg.batch_width == 64
    assert cfg.contiguous_fast_path is True

    assert ExecutionConfig(order="F").normalized().order == "column_major"
    assert ExecutionConfig(order="Column-Major").normalized().order == "column_major"


def test_execution_config_defaults():
    cfg = ExecutionConfig()
    assert cfg.normalized() == cfg
    assert cfg.alias_safe is True


def test_execution_config_rejects_dynamic_order():
    with pytest.raises(ValueError, match="row_major or column_major"):
        ExecutionConfig(order="dynamic").normalized()


def test_execution_config_rejects_unknown_order():
    with pytest.raises(ValueError, match="Unsupported layout"):
        ExecutionConfig(order="diagonal").normalized()


@pytest.mark.parametrize("width", [0, -8])
def test_execution_config_rejects_non_positive_batch_width(width):
    with pytest.raises(ValueError, match="batch_width must be positive"):
        ExecutionConfig(batch_width=width).normalized()
