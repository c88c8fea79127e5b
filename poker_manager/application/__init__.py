"""
Application Layer - 应用服务层

该层实现CQRS模式，包含命令服务和查询服务。
应用层可以访问核心层，但不能被核心层访问。

Services:
    SessionCommandService: 会话命令服务（状态变更操作）
    SessionQueryService: 会话查询服务（只读操作）
    ConfigService: 配置管理服务

Types:
    CommandResult: 命令执行结果
    QueryResult: 查询结果
    PokerSession: 牌局会话状态
    PlayerSummary: 玩家账本摘要
    SessionSummary: 会话总览
"""

from .types import (
    ResultStatus,
    CommandResult,
    QueryResult,
    ApplicationError,
    ValidationError,
    BusinessRuleViolationError,
)

from .config_service import ConfigService, ConfigType, get_config_service
from .session_command_service import SessionCommandService, PokerSession, SessionMode
from .session_query_service import (
    SessionQueryService,
    PlayerSummary,
    SessionSummary,
    BlindScheduleView,
)

__all__ = [
    # 类型
    "ResultStatus",
    "CommandResult",
    "QueryResult",
    "ApplicationError",
    "ValidationError",
    "BusinessRuleViolationError",

    # 服务
    "ConfigService",
    "ConfigType",
    "get_config_service",
    "SessionCommandService",
    "SessionQueryService",

    # 数据类
    "PokerSession",
    "SessionMode",
    "PlayerSummary",
    "SessionSummary",
    "BlindScheduleView",
]
