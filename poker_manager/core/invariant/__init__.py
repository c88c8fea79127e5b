"""
Invariant Module - 数学不变量

该模块实现筹码分配与结算的数学不变量检查，包括：
- 分配金额守恒与筹码数量非负
- 结算后余额归零与转账笔数上限
- 账本交易一致性

Classes:
    SessionInvariants: 会话不变量检查器
    DistributionInvariantChecker: 筹码分配检查器
    SettlementInvariantChecker: 结算检查器
    LedgerInvariantChecker: 账本检查器
    BaseInvariantChecker: 不变量检查器基类
"""

from .types import (
    InvariantType,
    Severity,
    InvariantViolation,
    InvariantCheckResult,
    InvariantError
)
from .base_checker import BaseInvariantChecker
from .distribution_checker import DistributionCheckSubject, DistributionInvariantChecker
from .settlement_checker import SettlementCheckSubject, SettlementInvariantChecker
from .ledger_checker import LedgerInvariantChecker
from .session_invariants import SessionInvariants

__all__ = [
    # 主要接口
    'SessionInvariants',

    # 具体检查器
    'DistributionInvariantChecker',
    'SettlementInvariantChecker',
    'LedgerInvariantChecker',
    'BaseInvariantChecker',
    'DistributionCheckSubject',
    'SettlementCheckSubject',

    # 类型定义
    'InvariantType',
    'Severity',
    'InvariantViolation',
    'InvariantCheckResult',
    'InvariantError'
]
