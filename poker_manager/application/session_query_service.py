"""
Session Query Service - 会话查询服务

处理所有会话只读操作，遵循CQRS模式。
查询服务负责：
- 会话总览（总银行、玩家余额）
- 整桌筹码数量统计
- 单个玩家的账本摘要
- 奖池与盲注结构
"""

from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ..core.chips import Distribution
from ..core.ledger import Player
from ..core.money import ZERO, money_sum
from ..core.tournament import BlindLevel, PrizePool, RoundWinner
from .config_service import ConfigService, get_config_service
from .types import QueryResult


@dataclass(frozen=True)
class PlayerSummary:
    """玩家账本摘要"""
    player_id: str
    name: str
    balance: Decimal
    total_paid_in: Decimal
    total_paid_out: Decimal
    rebuys: int
    add_ons: int
    transaction_count: int
    chip_counts: Dict[int, int]

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式"""
        return asdict(self)


@dataclass(frozen=True)
class SessionSummary:
    """会话总览"""
    session_id: str
    mode: str
    round_number: int
    total_bank: Decimal
    total_paid_out: Decimal
    balance_sum: Decimal
    chip_set_locked: bool
    players: List[PlayerSummary]
    round_winners: List[RoundWinner]

    @property
    def player_count(self) -> int:
        return len(self.players)


@dataclass(frozen=True)
class BlindScheduleView:
    """盲注结构视图"""
    levels: List[BlindLevel]
    current_index: int
    current_level: BlindLevel
    next_level: Optional[BlindLevel]


class SessionQueryService:
    """会话查询服务"""

    def __init__(self, command_service=None, config_service: Optional[ConfigService] = None):
        """
        初始化查询服务

        Args:
            command_service: 命令服务实例，用于访问会话
            config_service: 配置服务，None时使用全局单例
        """
        self._command_service = command_service
        self._config_service = config_service or get_config_service()

    def get_session_summary(self, session_id: str) -> QueryResult[SessionSummary]:
        """
        获取会话总览

        total_bank是所有买入、重买、加买的总额。
        """
        session_result = self._get_session(session_id)
        if not session_result.success:
            return session_result
        session = session_result.data

        players = [self._summarize(p, session.chip_set) for p in session.players.values()]
        summary = SessionSummary(
            session_id=session.session_id,
            mode=session.mode.value,
            round_number=session.round_number,
            total_bank=money_sum(p.total_paid_in for p in players),
            total_paid_out=money_sum(p.total_paid_out for p in players),
            balance_sum=money_sum(p.balance for p in players),
            chip_set_locked=session.is_chip_set_locked,
            players=players,
            round_winners=list(session.round_winners)
        )
        return QueryResult.success_result(summary)

    def get_player_summary(self, session_id: str, player_id: str) -> QueryResult[PlayerSummary]:
        """获取单个玩家的账本摘要"""
        session_result = self._get_session(session_id)
        if not session_result.success:
            return session_result
        session = session_result.data

        player = session.players.get(player_id)
        if player is None:
            return QueryResult.validation_error(
                f"玩家不存在: {player_id}",
                error_code="PLAYER_NOT_FOUND"
            )
        return QueryResult.success_result(self._summarize(player, session.chip_set))

    def get_chip_totals(self, session_id: str) -> QueryResult[Dict[int, int]]:
        """
        统计整桌发出的筹码数量

        Returns:
            查询结果，包含 {denomination_id: count}，每种面值都有条目
        """
        session_result = self._get_session(session_id)
        if not session_result.success:
            return session_result
        session = session_result.data

        totals = Distribution.empty(session.chip_set)
        for player in session.players.values():
            totals = totals.merged_with(self._player_chips(player))
        return QueryResult.success_result(
            {denomination_id: totals.count_for(denomination_id) for denomination_id in session.chip_set.ids()}
        )

    def get_prize_pool(self, players: Optional[int] = None,
                       buy_in: Any = None) -> QueryResult[PrizePool]:
        """
        计算赢家通吃的奖池

        Args:
            players: 参赛人数，None时使用会话配置中的默认值
            buy_in: 每人买入，None时使用会话配置中的默认值
        """
        config = self._config_service.get_session_config().data
        players = config.prize_pool_players if players is None else players
        buy_in = config.prize_pool_buy_in if buy_in is None else buy_in
        try:
            return QueryResult.success_result(PrizePool.calculate(players, buy_in))
        except ValueError as e:
            return QueryResult.validation_error(str(e), error_code="INVALID_PRIZE_POOL")

    def get_blind_levels(self, session_id: str) -> QueryResult[BlindScheduleView]:
        """获取盲注结构与当前级别"""
        session_result = self._get_session(session_id)
        if not session_result.success:
            return session_result
        schedule = session_result.data.blind_schedule
        return QueryResult.success_result(BlindScheduleView(
            levels=schedule.levels,
            current_index=schedule.current_index,
            current_level=schedule.current_level,
            next_level=schedule.next_level
        ))

    def _get_session(self, session_id: str) -> QueryResult[Any]:
        if self._command_service is None:
            return QueryResult.failure_result(
                "命令服务未初始化",
                error_code="COMMAND_SERVICE_NOT_INITIALIZED"
            )
        session = self._command_service.get_session(session_id)
        if session is None:
            return QueryResult.validation_error(
                f"会话不存在: {session_id}",
                error_code="SESSION_NOT_FOUND"
            )
        return QueryResult.success_result(session)

    @staticmethod
    def _player_chips(player: Player) -> Distribution:
        chips = Distribution(counts={}, total_value=ZERO)
        for transaction in player.transactions:
            if transaction.distribution is not None:
                chips = chips.merged_with(transaction.distribution)
        return chips

    def _summarize(self, player: Player, chip_set) -> PlayerSummary:
        chips = self._player_chips(player)
        return PlayerSummary(
            player_id=player.player_id,
            name=player.name,
            balance=player.balance,
            total_paid_in=player.total_paid_in,
            total_paid_out=player.total_paid_out,
            rebuys=player.rebuys_this_round,
            add_ons=player.add_ons_this_round,
            transaction_count=len(player.transactions),
            chip_counts={d.denomination_id: chips.count_for(d.denomination_id) for d in chip_set.by_id()}
        )
