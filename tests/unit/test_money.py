"""金额工具测试."""

from decimal import Decimal

import pytest

from poker_manager.core.money import (
    MONEY_TOLERANCE,
    format_money,
    is_negligible,
    money_add,
    money_sub,
    money_sum,
    quantize_money,
    to_decimal,
)


class TestToDecimal:
    """金额转换测试类."""

    def test_accepts_common_numeric_types(self):
        """测试int、str、float、Decimal都能转换."""
        assert to_decimal(5) == Decimal("5")
        assert to_decimal("37.00") == Decimal("37.00")
        assert to_decimal(0.1) == Decimal("0.1")
        assert to_decimal(Decimal("2.5")) == Decimal("2.5")

    @pytest.mark.parametrize("value", ["abc", None, True, "NaN", "Infinity", float("inf")])
    def test_rejects_invalid_values(self, value):
        """测试非数值、布尔值与非有限值被拒绝."""
        with pytest.raises(ValueError):
            to_decimal(value)


class TestMoneyArithmetic:
    """金额运算测试类."""

    def test_quantize_rounds_half_up(self):
        """测试取整到分，四舍五入."""
        assert quantize_money("0.125") == Decimal("0.13")
        assert quantize_money("0.124") == Decimal("0.12")
        assert quantize_money("1.005", digits=2) == Decimal("1.01")

    def test_quantize_respects_digits(self):
        """测试自定义最小货币单位位数."""
        assert quantize_money("1.2345", digits=3) == Decimal("1.235")
        assert quantize_money("7.6", digits=0) == Decimal("8")

    def test_add_sub_quantize_every_step(self):
        """测试加减结果都已取整."""
        assert money_add(Decimal("0.1"), Decimal("0.2")) == Decimal("0.30")
        assert money_sub(Decimal("10"), Decimal("0.333")) == Decimal("9.67")

    def test_money_sum(self):
        """测试逐项累加."""
        assert money_sum([Decimal("0.25")] * 4) == Decimal("1.00")
        assert money_sum([]) == Decimal("0.00")

    @pytest.mark.parametrize("value", ["123456789012345678901234567", "1e27"])
    def test_quantize_beyond_precision_is_value_error(self, value):
        """测试取整后超出Decimal精度的金额抛出ValueError."""
        with pytest.raises(ValueError):
            quantize_money(value)
        with pytest.raises(ValueError):
            money_add(to_decimal(value), Decimal("1"))

    def test_is_negligible(self):
        """测试容差内视为零."""
        assert is_negligible(Decimal("0"))
        assert is_negligible(Decimal("0.005"))
        assert is_negligible(Decimal("-0.009"))
        assert not is_negligible(Decimal("0.01"))
        assert not is_negligible(MONEY_TOLERANCE)

    def test_is_negligible_with_zero_tolerance(self):
        """测试容差为0时只有精确的0才视为零."""
        assert is_negligible(Decimal("0.00"), Decimal("0"))
        assert not is_negligible(Decimal("0.01"), Decimal("0"))

    def test_format_money(self):
        """测试两位小数显示."""
        assert format_money(37) == "37.00"
        assert format_money("0.5") == "0.50"
