"""数据传输对象定义.

这个模块定义了UI层传入会话控制器的输入格式。
使用Pydantic dataclass在进入核心层之前完成输入校验。
"""

from decimal import Decimal
from typing import Optional

from pydantic import Field, ValidationInfo, field_validator
from pydantic.dataclasses import dataclass as pydantic_dataclass


@pydantic_dataclass
class MoneyInput:
    """金额输入（重买、加买、奖金、兑现）."""
    amount: Decimal = Field(..., gt=0, description="金额")


@pydantic_dataclass
class PlayerEntryInput:
    """新玩家入桌输入.

    包含玩家名称和可选的买入金额。
    """
    name: str = Field(..., min_length=1, description="玩家名称")
    amount: Optional[Decimal] = Field(None, gt=0, description="买入金额")

    @field_validator('name')
    @classmethod
    def strip_name(cls, v: str) -> str:
        """去除名称两端空白."""
        v = v.strip()
        if not v:
            raise ValueError("玩家名称不能为空")
        return v


@pydantic_dataclass
class DenominationInput:
    """筹码面值输入."""
    face_value: Decimal = Field(..., ge=0, description="面值")
    name: str = Field(..., min_length=1, description="名称")
    color: str = Field("#ffffff", description="显示颜色")


@pydantic_dataclass
class BlindLevelInput:
    """盲注级别输入."""
    small_blind: int = Field(..., ge=0, description="小盲")
    big_blind: int = Field(..., ge=0, description="大盲")
    ante: int = Field(0, ge=0, description="前注")

    @field_validator('big_blind')
    @classmethod
    def validate_blind_relationship(cls, v: int, info: ValidationInfo) -> int:
        """验证大盲不小于小盲."""
        small_blind = info.data.get('small_blind')
        if small_blind is not None and v < small_blind:
            raise ValueError("大盲不能小于小盲")
        return v
