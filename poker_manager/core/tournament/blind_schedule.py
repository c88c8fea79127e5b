"""
盲注结构

管理锦标赛的盲注级别列表与当前级别。计时器本身不在核心层，
外部计时器在每轮结束时调用level_up()推进级别。
"""

from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple

__all__ = ['BlindLevel', 'BlindSchedule', 'DEFAULT_BLIND_LEVELS']


@dataclass(frozen=True)
class BlindLevel:
    """盲注级别"""
    level_id: int
    small_blind: int
    big_blind: int
    ante: int = 0

    def __post_init__(self):
        """验证盲注数据的有效性"""
        if self.small_blind < 0 or self.big_blind < 0 or self.ante < 0:
            raise ValueError(f"盲注和前注不能为负数: {self.small_blind}/{self.big_blind}/{self.ante}")

    def __str__(self) -> str:
        text = f"{self.small_blind}/{self.big_blind}"
        return f"{text} (ante {self.ante})" if self.ante > 0 else text


DEFAULT_BLIND_LEVELS: Tuple[BlindLevel, ...] = (
    BlindLevel(1, 25, 50, 0),
    BlindLevel(2, 50, 100, 0),
    BlindLevel(3, 75, 150, 0),
    BlindLevel(4, 100, 200, 25),
    BlindLevel(5, 150, 300, 50),
    BlindLevel(6, 200, 400, 50),
    BlindLevel(7, 300, 600, 75),
    BlindLevel(8, 500, 1000, 100),
)


class BlindSchedule:
    """
    盲注结构

    至少保留一个级别；当前级别索引始终有效。
    """

    def __init__(self, levels: Optional[Sequence[BlindLevel]] = None):
        """
        初始化盲注结构

        Args:
            levels: 盲注级别列表，None时使用默认的8级结构
        """
        self._levels: List[BlindLevel] = list(levels if levels is not None else DEFAULT_BLIND_LEVELS)
        if not self._levels:
            raise ValueError("盲注结构至少需要一个级别")
        self._current_index = 0

    @property
    def levels(self) -> List[BlindLevel]:
        return list(self._levels)

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def current_level(self) -> BlindLevel:
        return self._levels[self._current_index]

    @property
    def next_level(self) -> Optional[BlindLevel]:
        if self._current_index < len(self._levels) - 1:
            return self._levels[self._current_index + 1]
        return None

    @property
    def is_final_level(self) -> bool:
        return self.next_level is None

    def level_up(self) -> bool:
        """
        进入下一级别

        Returns:
            是否成功进入下一级别；已是最后一级时返回False
        """
        if self.is_final_level:
            return False
        self._current_index += 1
        return True

    def add_level(self) -> BlindLevel:
        """
        追加一个级别: 小盲=上一级大盲，大盲翻倍，前注×1.5向下取整

        Returns:
            新增的级别
        """
        last = self._levels[-1]
        level = BlindLevel(
            level_id=max(l.level_id for l in self._levels) + 1,
            small_blind=last.big_blind,
            big_blind=last.big_blind * 2,
            ante=int(last.ante * 1.5) if last.ante > 0 else 0
        )
        self._levels.append(level)
        return level

    def update_level(self, level_id: int, **changes) -> BlindLevel:
        """
        修改一个级别的small_blind、big_blind或ante

        Raises:
            ValueError: 级别不存在或字段无效
        """
        invalid = set(changes) - {'small_blind', 'big_blind', 'ante'}
        if invalid:
            raise ValueError(f"不支持修改的字段: {sorted(invalid)}")
        index = self._index_of(level_id)
        updated = replace(self._levels[index], **changes)
        self._levels[index] = updated
        return updated

    def remove_level(self, level_id: int) -> None:
        """
        删除一个级别

        Raises:
            ValueError: 级别不存在，或这是最后一个级别
        """
        if len(self._levels) <= 1:
            raise ValueError("盲注结构至少需要一个级别")
        index = self._index_of(level_id)
        del self._levels[index]
        if index < self._current_index or self._current_index >= len(self._levels):
            self._current_index = max(self._current_index - 1, 0)

    def reset(self) -> None:
        self._current_index = 0

    def _index_of(self, level_id: int) -> int:
        for index, level in enumerate(self._levels):
            if level.level_id == level_id:
                return index
        raise ValueError(f"盲注级别不存在: {level_id}")
