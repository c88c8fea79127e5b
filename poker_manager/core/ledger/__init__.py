"""
账本模块

提供交易记录与玩家余额的记账功能。
"""

from .transaction import TransactionKind, LedgerTransaction
from .player import Player, apply_transaction, close_round, reset_player

__all__ = [
    'TransactionKind',
    'LedgerTransaction',
    'Player',
    'apply_transaction',
    'close_round',
    'reset_player',
]
