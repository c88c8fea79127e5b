"""
结算模块

提供债务抵消与最少转账结算功能。
"""

from .types import Transfer, SettlementResult, apply_transfers
from .settlement_engine import SettlementEngine, settle

__all__ = [
    'Transfer',
    'SettlementResult',
    'apply_transfers',
    'SettlementEngine',
    'settle',
]
