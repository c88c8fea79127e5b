"""
筹码模块

提供面值集合、分配策略和筹码分配引擎。
"""

from .denomination import Denomination, ChipSet
from .distribution import (
    Distribution,
    DistributionFailureReason,
    DistributionResult,
    DistributionError,
)
from .allocation_strategies import (
    DistributionPolicy,
    AllocationState,
    AllocationContext,
    seed_variety,
    proportional_share,
    greedy_fill,
    residual_mop_up,
    HEURISTIC_PIPELINE,
    FALLBACK_PIPELINE,
    run_pipeline,
)
from .chip_distributor import ChipDistributor, distribute

__all__ = [
    'Denomination',
    'ChipSet',
    'Distribution',
    'DistributionFailureReason',
    'DistributionResult',
    'DistributionError',
    'DistributionPolicy',
    'AllocationState',
    'AllocationContext',
    'seed_variety',
    'proportional_share',
    'greedy_fill',
    'residual_mop_up',
    'HEURISTIC_PIPELINE',
    'FALLBACK_PIPELINE',
    'run_pipeline',
    'ChipDistributor',
    'distribute',
]
