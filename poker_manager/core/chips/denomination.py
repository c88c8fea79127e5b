"""
筹码面值与面值集合

定义单种筹码（面值、颜色、名称）以及按ID唯一的有序面值集合。
面值集合是不可变的，编辑操作均返回新的集合。
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from ..money import ZERO, money_add, quantize_money, to_decimal

__all__ = ['Denomination', 'ChipSet']


@dataclass(frozen=True)
class Denomination:
    """单种筹码"""
    denomination_id: int
    face_value: Decimal
    color: str
    name: str

    def __post_init__(self):
        """验证并规范化面值"""
        if isinstance(self.denomination_id, bool) or not isinstance(self.denomination_id, int):
            raise ValueError(f"denomination_id必须是整数: {self.denomination_id!r}")
        face_value = to_decimal(self.face_value)
        if face_value < 0:
            raise ValueError(f"筹码面值不能为负数: {face_value}")
        object.__setattr__(self, 'face_value', face_value)
        if not self.name or not self.name.strip():
            raise ValueError("筹码名称不能为空")

    @property
    def is_usable(self) -> bool:
        """面值为0的筹码不参与分配"""
        return self.face_value > 0

    def with_face_value(self, face_value) -> 'Denomination':
        return replace(self, face_value=to_decimal(face_value))

    def __str__(self) -> str:
        return f"{self.name}({self.face_value})"


@dataclass(frozen=True)
class ChipSet:
    """
    筹码面值集合

    保持调用方给定的顺序，按denomination_id唯一。
    分配算法通过ascending()/descending()获取按面值排序的视图。
    """
    denominations: Tuple[Denomination, ...] = field(default_factory=tuple)

    def __post_init__(self):
        denominations = tuple(self.denominations)
        ids = [d.denomination_id for d in denominations]
        if len(ids) != len(set(ids)):
            raise ValueError(f"存在重复的筹码ID: {ids}")
        object.__setattr__(self, 'denominations', denominations)

    @classmethod
    def from_values(cls, values: Sequence[Tuple]) -> 'ChipSet':
        """
        从(面值, 颜色, 名称)元组列表创建集合，ID从1开始顺序编号

        Args:
            values: [(face_value, color, name), ...]
        """
        return cls(tuple(
            Denomination(denomination_id=i, face_value=fv, color=color, name=name)
            for i, (fv, color, name) in enumerate(values, start=1)
        ))

    def __len__(self) -> int:
        return len(self.denominations)

    def __iter__(self) -> Iterator[Denomination]:
        return iter(self.denominations)

    def __contains__(self, denomination_id: object) -> bool:
        return any(d.denomination_id == denomination_id for d in self.denominations)

    @property
    def is_empty(self) -> bool:
        return not self.denominations

    def ids(self) -> List[int]:
        return [d.denomination_id for d in self.denominations]

    def get(self, denomination_id: int) -> Optional[Denomination]:
        for denomination in self.denominations:
            if denomination.denomination_id == denomination_id:
                return denomination
        return None

    def ascending(self) -> List[Denomination]:
        """按面值从小到大，面值相同按ID"""
        return sorted(self.denominations, key=lambda d: (d.face_value, d.denomination_id))

    def descending(self) -> List[Denomination]:
        """按面值从大到小，面值相同按ID"""
        return sorted(self.denominations, key=lambda d: (-d.face_value, d.denomination_id))

    def usable(self) -> List[Denomination]:
        return [d for d in self.denominations if d.is_usable]

    def by_id(self) -> List[Denomination]:
        return sorted(self.denominations, key=lambda d: d.denomination_id)

    def total_value(self, counts: Mapping[int, int]) -> Decimal:
        """
        计算筹码数量对应的总金额

        Args:
            counts: {denomination_id: count}

        Returns:
            总金额（取整到最小货币单位）
        """
        total = quantize_money(ZERO)
        for denomination_id, count in counts.items():
            denomination = self.get(denomination_id)
            if denomination is None:
                raise ValueError(f"未知的筹码ID: {denomination_id}")
            total = money_add(total, denomination.face_value * count)
        return total

    def next_id(self) -> int:
        return max(self.ids(), default=0) + 1

    def with_denomination(self, denomination: Denomination) -> 'ChipSet':
        """追加一种筹码，返回新集合"""
        if denomination.denomination_id in self:
            raise ValueError(f"筹码ID已存在: {denomination.denomination_id}")
        return ChipSet(self.denominations + (denomination,))

    def replace_denomination(self, denomination: Denomination) -> 'ChipSet':
        """替换同ID的筹码，返回新集合"""
        if denomination.denomination_id not in self:
            raise ValueError(f"筹码ID不存在: {denomination.denomination_id}")
        return ChipSet(tuple(
            denomination if d.denomination_id == denomination.denomination_id else d
            for d in self.denominations
        ))

    def without_denomination(self, denomination_id: int) -> 'ChipSet':
        """移除一种筹码，返回新集合"""
        if denomination_id not in self:
            raise ValueError(f"筹码ID不存在: {denomination_id}")
        return ChipSet(tuple(d for d in self.denominations if d.denomination_id != denomination_id))

    def to_dict(self) -> Dict[int, Dict[str, str]]:
        return {
            d.denomination_id: {'face_value': str(d.face_value), 'color': d.color, 'name': d.name}
            for d in self.denominations
        }
