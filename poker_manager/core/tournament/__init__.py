"""
锦标赛模块

提供盲注结构、奖池计算和轮次冠军记录。
"""

from .blind_schedule import BlindLevel, BlindSchedule, DEFAULT_BLIND_LEVELS
from .prize_pool import PrizePool, RoundWinner

__all__ = [
    'BlindLevel',
    'BlindSchedule',
    'DEFAULT_BLIND_LEVELS',
    'PrizePool',
    'RoundWinner',
]
