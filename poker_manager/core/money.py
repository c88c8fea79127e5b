"""
金额工具

所有金额在核心层内部统一使用Decimal表示，每一步加减之后都取整到
最小货币单位（默认2位小数），避免浮点误差在多个阶段之间累积。
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Iterable

__all__ = [
    'MINOR_UNIT_DIGITS',
    'MONEY_TOLERANCE',
    'ZERO',
    'to_decimal',
    'quantize_money',
    'money_add',
    'money_sub',
    'money_sum',
    'is_negligible',
    'format_money',
]

MINOR_UNIT_DIGITS = 2
MONEY_TOLERANCE = Decimal("0.01")
ZERO = Decimal("0")


def _unit(digits: int) -> Decimal:
    return Decimal(1).scaleb(-digits)


def to_decimal(value: Any) -> Decimal:
    """
    把任意数值转换为Decimal

    Args:
        value: int、float、str或Decimal

    Returns:
        对应的Decimal

    Raises:
        ValueError: 非数值、布尔值、NaN或无穷大
    """
    if isinstance(value, bool):
        raise ValueError(f"金额不能是布尔值: {value}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError, TypeError):
            raise ValueError(f"无效的金额: {value!r}")
    if not result.is_finite():
        raise ValueError(f"金额必须是有限数值: {value!r}")
    return result


def quantize_money(value: Any, digits: int = MINOR_UNIT_DIGITS) -> Decimal:
    """
    取整到最小货币单位（四舍五入）

    Raises:
        ValueError: 非数值，或取整后的位数超出Decimal上下文精度
    """
    decimal_value = to_decimal(value)
    try:
        return decimal_value.quantize(_unit(digits), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f"金额超出可表示的精度: {value!r}")


def money_add(a: Decimal, b: Decimal, digits: int = MINOR_UNIT_DIGITS) -> Decimal:
    return quantize_money(a + b, digits)


def money_sub(a: Decimal, b: Decimal, digits: int = MINOR_UNIT_DIGITS) -> Decimal:
    return quantize_money(a - b, digits)


def money_sum(values: Iterable[Decimal], digits: int = MINOR_UNIT_DIGITS) -> Decimal:
    """逐项累加，每一步都取整"""
    total = quantize_money(ZERO, digits)
    for value in values:
        total = money_add(total, value, digits)
    return total


def is_negligible(value: Decimal, tolerance: Decimal = MONEY_TOLERANCE) -> bool:
    """金额为0或绝对值小于容差时视为零"""
    return value == 0 or abs(value) < tolerance


def format_money(value: Any) -> str:
    # 稳定的两位小数显示格式
    return f"{quantize_money(value):.2f}"
