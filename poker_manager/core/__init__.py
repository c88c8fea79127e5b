"""
Core Module - 纯领域逻辑层

核心模块只能依赖其他核心模块，不能依赖应用层。
所有计算均为纯函数：不修改输入，不做I/O。

Modules:
    money: 金额转换与最小货币单位取整
    chips: 筹码面值集合与筹码分配引擎
    ledger: 玩家账本与交易记录
    settlement: 债务抵消与结算引擎
    invariant: 数学不变量检查
    tournament: 盲注结构与奖池计算
"""

from .chips import (
    Denomination,
    ChipSet,
    Distribution,
    DistributionResult,
    DistributionFailureReason,
    DistributionError,
    DistributionPolicy,
    ChipDistributor,
    distribute,
)
from .ledger import (
    TransactionKind,
    LedgerTransaction,
    Player,
    apply_transaction,
    close_round,
)
from .settlement import Transfer, SettlementResult, SettlementEngine, settle

__all__ = [
    'Denomination',
    'ChipSet',
    'Distribution',
    'DistributionResult',
    'DistributionFailureReason',
    'DistributionError',
    'DistributionPolicy',
    'ChipDistributor',
    'distribute',
    'TransactionKind',
    'LedgerTransaction',
    'Player',
    'apply_transaction',
    'close_round',
    'Transfer',
    'SettlementResult',
    'SettlementEngine',
    'settle',
]
