"""
Test Configuration - pytest配置文件

该文件提供测试的基础设施，包括：
- 通用的测试fixture（面值集合、分配引擎、玩家工厂）
- 测试标记定义

所有测试都会自动加载这些配置。
"""

from decimal import Decimal

import pytest

from poker_manager.application import ConfigService, SessionCommandService, SessionQueryService
from poker_manager.core.chips import ChipDistributor, ChipSet
from poker_manager.core.ledger import Player, TransactionKind, apply_transaction


@pytest.fixture
def default_chip_set():
    """现金局默认面值: 0.25 / 0.5 / 1 / 10"""
    return ChipSet.from_values([
        ("0.25", "#22c55e", "Verde"),
        ("0.5", "#ef4444", "Vermelha"),
        ("1", "#f5f5f5", "Branca"),
        ("10", "#171717", "Preta"),
    ])


@pytest.fixture
def tournament_chip_set():
    """锦标赛面值: 25 / 100 / 500 / 1000"""
    return ChipSet.from_values([
        ("25", "#22c55e", "Verde"),
        ("100", "#171717", "Preta"),
        ("500", "#8b5cf6", "Roxa"),
        ("1000", "#eab308", "Amarela"),
    ])


@pytest.fixture
def distributor():
    """默认参数的分配引擎"""
    return ChipDistributor()


def make_player(player_id: str, balance, name: str = None) -> Player:
    """创建一个余额为指定值的玩家

    负余额记为买入，正余额记为奖金，0则没有交易。
    """
    player = Player(player_id=player_id, name=name or player_id.upper())
    balance = Decimal(str(balance))
    if balance < 0:
        player = apply_transaction(player, TransactionKind.BUY_IN, -balance)
    elif balance > 0:
        player = apply_transaction(player, TransactionKind.PRIZE, balance)
    return player


@pytest.fixture
def player_factory():
    """玩家工厂fixture"""
    return make_player


@pytest.fixture
def config_service():
    """独立的配置服务，避免测试间共享全局单例"""
    return ConfigService()


@pytest.fixture
def command_service(config_service):
    """会话命令服务fixture"""
    return SessionCommandService(config_service=config_service)


@pytest.fixture
def query_service(command_service, config_service):
    """会话查询服务fixture"""
    return SessionQueryService(command_service, config_service)


# 测试标记定义
def pytest_configure(config):
    """pytest配置"""
    config.addinivalue_line(
        "markers", "property_test: 标记基于属性的测试"
    )
    config.addinivalue_line(
        "markers", "integration: 标记集成测试"
    )
