"""
Session Command Service - 会话命令服务

负责处理所有改变牌局会话状态的命令操作。
每个命令都返回CommandResult，业务异常不会泄漏给UI层。
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from ..core.chips import ChipDistributor, ChipSet, Denomination
from ..core.invariant import SessionInvariants
from ..core.ledger import Player, TransactionKind, apply_transaction, close_round
from ..core.money import to_decimal
from ..core.settlement import SettlementEngine
from ..core.tournament import BlindSchedule, RoundWinner
from .config_service import ConfigService, get_config_service
from .decorators import command_handler
from .dto import BlindLevelInput, DenominationInput, MoneyInput, PlayerEntryInput
from .types import BusinessRuleViolationError, CommandResult, ValidationError


class SessionMode(Enum):
    """会话模式"""
    CASH = "cash"              # 现金局
    TOURNAMENT = "tournament"  # 锦标赛


@dataclass
class PokerSession:
    """
    牌局会话状态

    玩家记录本身不可变，会话只持有每个玩家的最新版本。
    """
    session_id: str
    mode: SessionMode
    chip_set: ChipSet
    players: Dict[str, Player] = field(default_factory=dict)
    blind_schedule: BlindSchedule = field(default_factory=BlindSchedule)
    round_number: int = 1
    round_winners: List[RoundWinner] = field(default_factory=list)
    created_at: float = field(default_factory=time.time)
    last_updated: float = field(default_factory=time.time)
    next_player_seq: int = 1

    def update_timestamp(self):
        """更新时间戳"""
        self.last_updated = time.time()

    @property
    def is_chip_set_locked(self) -> bool:
        """有玩家在座时筹码面值不能修改"""
        return bool(self.players)


class SessionCommandService:
    """
    会话命令服务

    负责协调ChipDistributor、玩家账本和SettlementEngine，
    在每次资金进入牌桌时生成筹码分配，在牌局结束时生成结算转账。
    """

    def __init__(self, config_service: Optional[ConfigService] = None,
                 enable_invariant_checks: Optional[bool] = None,
                 session_profile: str = "default",
                 policy_profile: str = "default"):
        """
        初始化会话命令服务

        Args:
            config_service: 配置服务实例，None时使用全局单例
            enable_invariant_checks: 是否启用不变量检查，None时读取会话配置
            session_profile: 会话配置档案名
            policy_profile: 分配策略配置档案名

        Raises:
            ApplicationError: 会话配置或分配策略配置无效（例如档案被改成了非法的比例）
        """
        self._logger = logging.getLogger(__name__)
        self._config_service = config_service or get_config_service()

        session_config = self._config_service.get_session_config(session_profile).unwrap()
        policy = self._config_service.get_distribution_policy(policy_profile).unwrap()

        self._tolerance = to_decimal(session_config.tolerance)
        self._digits = session_config.minor_unit_digits
        self._enable_invariant_checks = (
            session_config.enable_invariant_checks
            if enable_invariant_checks is None else enable_invariant_checks
        )

        self._distributor = ChipDistributor(policy)
        self._settlement_engine = SettlementEngine(self._tolerance, self._digits)
        self._invariants = SessionInvariants(self._tolerance)
        self._sessions: Dict[str, PokerSession] = {}

    # ==================== 会话管理 ====================

    @command_handler
    def create_session(self, mode: SessionMode = SessionMode.CASH,
                       chip_profile: Optional[str] = None,
                       session_id: Optional[str] = None) -> CommandResult:
        """
        创建新会话

        Args:
            mode: 会话模式
            chip_profile: 筹码配置档案名，None时现金局用default、锦标赛用tournament
            session_id: 会话ID，None时自动生成

        Returns:
            CommandResult: data中包含session_id
        """
        if not isinstance(mode, SessionMode):
            raise ValidationError(f"未知的会话模式: {mode}", "INVALID_SESSION_MODE")
        session_id = session_id or f"session_{uuid.uuid4().hex[:8]}"
        if session_id in self._sessions:
            raise BusinessRuleViolationError(f"会话已存在: {session_id}", "SESSION_ALREADY_EXISTS")

        profile = chip_profile or ("tournament" if mode == SessionMode.TOURNAMENT else "default")
        chip_set = self._config_service.get_chip_set(profile).unwrap()

        self._sessions[session_id] = PokerSession(
            session_id=session_id,
            mode=mode,
            chip_set=chip_set
        )
        self._logger.info(f"[会话] 创建{mode.value}会话 {session_id}，筹码配置 {profile}")
        return CommandResult.success_result("会话创建成功", {'session_id': session_id})

    @command_handler
    def reset_session(self, session_id: str) -> CommandResult:
        """
        重置会话: 清空所有玩家、交易、轮次冠军，盲注回到第一级

        筹码面值集合保持不变。
        """
        session = self._require_session(session_id)
        removed = len(session.players)
        session.players.clear()
        session.round_winners.clear()
        session.round_number = 1
        session.next_player_seq = 1
        session.blind_schedule.reset()
        session.update_timestamp()
        self._logger.info(f"[会话] 会话 {session_id} 已重置，清除 {removed} 名玩家")
        return CommandResult.success_result("会话已重置", {'removed_players': removed})

    def get_session(self, session_id: str) -> Optional[PokerSession]:
        """获取会话对象（查询服务使用）"""
        return self._sessions.get(session_id)

    # ==================== 玩家与账本 ====================

    @command_handler
    def add_player(self, session_id: str, name: str, buy_in: Any = None) -> CommandResult:
        """
        玩家入桌

        Args:
            session_id: 会话ID
            name: 玩家名称
            buy_in: 买入金额，None时只登记玩家、不记账

        Returns:
            CommandResult: data中包含player_id、balance，有买入时还包含distribution
        """
        session = self._require_session(session_id)
        entry = PlayerEntryInput(name=name, amount=buy_in)
        name = entry.name

        player_id = f"player_{session.next_player_seq}"
        player = Player(player_id=player_id, name=name, round_number=session.round_number)
        data: Dict[str, Any] = {'player_id': player_id}
        if entry.amount is not None:
            player, distribution = self._record_inbound(
                session, player, TransactionKind.BUY_IN, entry.amount, "买入"
            )
            data['distribution'] = distribution.to_dict()

        session.players[player_id] = player
        session.next_player_seq += 1
        session.update_timestamp()
        data['balance'] = player.balance
        self._logger.info(f"[会话] 玩家 {name} 入桌 ({player_id})，余额 {player.balance}")
        return CommandResult.success_result(f"玩家 {name} 入桌成功", data)

    @command_handler
    def remove_player(self, session_id: str, player_id: str) -> CommandResult:
        """移除玩家，仅限尚无任何交易记录的玩家"""
        session = self._require_session(session_id)
        player = self._require_player(session, player_id)
        if player.has_transactions:
            raise BusinessRuleViolationError(
                f"玩家 {player.name} 已有交易记录，不能移除", "PLAYER_HAS_TRANSACTIONS"
            )
        del session.players[player_id]
        session.update_timestamp()
        self._logger.info(f"[会话] 玩家 {player.name} 离开会话 {session_id}")
        return CommandResult.success_result(f"玩家 {player.name} 已移除")

    @command_handler
    def record_buy_in(self, session_id: str, player_id: str, amount: Any) -> CommandResult:
        """为已登记的玩家记录买入"""
        return self._inbound_command(session_id, player_id, TransactionKind.BUY_IN, amount, "买入")

    @command_handler
    def record_rebuy(self, session_id: str, player_id: str, amount: Any) -> CommandResult:
        """记录重买"""
        return self._inbound_command(session_id, player_id, TransactionKind.REBUY, amount, "重买")

    @command_handler
    def record_add_on(self, session_id: str, player_id: str, amount: Any) -> CommandResult:
        """记录加买"""
        return self._inbound_command(session_id, player_id, TransactionKind.ADD_ON, amount, "加买")

    @command_handler
    def record_prize(self, session_id: str, player_id: str, amount: Any) -> CommandResult:
        """记录奖金发放"""
        return self._outbound_command(session_id, player_id, TransactionKind.PRIZE, amount, "奖金")

    @command_handler
    def record_cash_out(self, session_id: str, player_id: str, amount: Any) -> CommandResult:
        """记录现金局离桌兑现（按玩家手中筹码的价值）"""
        session = self._require_session(session_id)
        if session.mode != SessionMode.CASH:
            raise BusinessRuleViolationError("只有现金局可以兑现筹码", "WRONG_SESSION_MODE")
        return self._outbound_command(session_id, player_id, TransactionKind.CASH_OUT, amount, "兑现")

    def _inbound_command(self, session_id: str, player_id: str, kind: TransactionKind,
                         amount: Any, label: str) -> CommandResult:
        session = self._require_session(session_id)
        player = self._require_player(session, player_id)
        money = MoneyInput(amount=amount)

        player, distribution = self._record_inbound(session, player, kind, money.amount, label)
        session.players[player_id] = player
        session.update_timestamp()
        self._logger.info(f"[会话] 玩家 {player.name} {label} {money.amount}，余额 {player.balance}")
        return CommandResult.success_result(
            f"{label}记录成功",
            {'distribution': distribution.to_dict(), 'balance': player.balance}
        )

    def _outbound_command(self, session_id: str, player_id: str, kind: TransactionKind,
                          amount: Any, label: str) -> CommandResult:
        session = self._require_session(session_id)
        player = self._require_player(session, player_id)
        money = MoneyInput(amount=amount)

        player = apply_transaction(player, kind, money.amount, description=label, digits=self._digits)
        session.players[player_id] = player
        session.update_timestamp()
        self._logger.info(f"[会话] 玩家 {player.name} {label} {money.amount}，余额 {player.balance}")
        return CommandResult.success_result(f"{label}记录成功", {'balance': player.balance})

    def _record_inbound(self, session: PokerSession, player: Player, kind: TransactionKind,
                        amount: Decimal, label: str):
        result = self._distributor.distribute(amount, session.chip_set)
        if not result.success:
            raise ValidationError(
                f"无法用当前筹码凑出 {amount}: {result.message}",
                result.reason.name
            )
        if self._enable_invariant_checks:
            self._invariants.verify_distribution(result.amount, result.distribution, session.chip_set)
        player = apply_transaction(
            player, kind, result.amount,
            distribution=result.distribution,
            description=label,
            digits=self._digits
        )
        return player, result.distribution

    # ==================== 筹码面值 ====================

    @command_handler
    def add_denomination(self, session_id: str, face_value: Any, name: str,
                         color: str = "#ffffff") -> CommandResult:
        """添加筹码面值"""
        session = self._require_unlocked_chip_set(session_id)
        entry = DenominationInput(face_value=face_value, name=name, color=color)
        denomination = Denomination(
            denomination_id=session.chip_set.next_id(),
            face_value=entry.face_value,
            color=entry.color,
            name=entry.name
        )
        session.chip_set = session.chip_set.with_denomination(denomination)
        session.update_timestamp()
        self._logger.info(f"[会话] 添加筹码 {denomination}")
        return CommandResult.success_result(
            "筹码添加成功", {'denomination_id': denomination.denomination_id}
        )

    @command_handler
    def update_denomination(self, session_id: str, denomination_id: int,
                            face_value: Any = None, name: Optional[str] = None,
                            color: Optional[str] = None) -> CommandResult:
        """修改筹码面值、名称或颜色"""
        session = self._require_unlocked_chip_set(session_id)
        existing = session.chip_set.get(denomination_id)
        if existing is None:
            raise ValidationError(f"筹码不存在: {denomination_id}", "DENOMINATION_NOT_FOUND")
        entry = DenominationInput(
            face_value=existing.face_value if face_value is None else face_value,
            name=existing.name if name is None else name,
            color=existing.color if color is None else color
        )
        updated = Denomination(denomination_id, entry.face_value, entry.color, entry.name)
        session.chip_set = session.chip_set.replace_denomination(updated)
        session.update_timestamp()
        self._logger.info(f"[会话] 修改筹码 {existing} -> {updated}")
        return CommandResult.success_result("筹码修改成功")

    @command_handler
    def remove_denomination(self, session_id: str, denomination_id: int) -> CommandResult:
        """删除筹码面值"""
        session = self._require_unlocked_chip_set(session_id)
        if denomination_id not in session.chip_set:
            raise ValidationError(f"筹码不存在: {denomination_id}", "DENOMINATION_NOT_FOUND")
        session.chip_set = session.chip_set.without_denomination(denomination_id)
        session.update_timestamp()
        self._logger.info(f"[会话] 删除筹码 {denomination_id}")
        return CommandResult.success_result("筹码删除成功")

    @command_handler
    def reset_chip_set(self, session_id: str, chip_profile: str = "default") -> CommandResult:
        """恢复配置档案中的筹码面值集合"""
        session = self._require_unlocked_chip_set(session_id)
        session.chip_set = self._config_service.get_chip_set(chip_profile).unwrap()
        session.update_timestamp()
        self._logger.info(f"[会话] 筹码恢复为配置 {chip_profile}")
        return CommandResult.success_result("筹码已恢复默认")

    # ==================== 锦标赛 ====================

    @command_handler
    def end_round(self, session_id: str, winner_id: Optional[str] = None) -> CommandResult:
        """
        结束当前轮次

        记录轮次冠军（可选），所有玩家的本轮重买/加买计数清零，余额保持不变。
        """
        session = self._require_tournament(session_id)
        winner = None
        if winner_id is not None:
            player = self._require_player(session, winner_id)
            winner = RoundWinner(session.round_number, player.player_id, player.name)
            session.round_winners.append(winner)

        for player_id, player in list(session.players.items()):
            session.players[player_id] = close_round(player)

        finished = session.round_number
        session.round_number += 1
        session.update_timestamp()
        self._logger.info(
            f"[锦标赛] 第 {finished} 轮结束，冠军: {winner.winner_name if winner else '无'}"
        )
        return CommandResult.success_result(
            f"第 {finished} 轮结束",
            {'finished_round': finished, 'round_number': session.round_number, 'winner': winner}
        )

    @command_handler
    def advance_blind_level(self, session_id: str) -> CommandResult:
        """进入下一盲注级别（外部计时器到点时调用）"""
        session = self._require_tournament(session_id)
        schedule = session.blind_schedule
        if not schedule.level_up():
            raise BusinessRuleViolationError("已是最后一个盲注级别", "FINAL_BLIND_LEVEL")
        session.update_timestamp()
        self._logger.info(f"[锦标赛] 盲注升级为 {schedule.current_level}")
        return CommandResult.success_result(
            "盲注已升级", {'current_level': schedule.current_level}
        )

    @command_handler
    def add_blind_level(self, session_id: str) -> CommandResult:
        """在末尾追加一个盲注级别"""
        session = self._require_tournament(session_id)
        level = session.blind_schedule.add_level()
        session.update_timestamp()
        self._logger.info(f"[锦标赛] 新增盲注级别 {level}")
        return CommandResult.success_result("盲注级别已添加", {'level': level})

    @command_handler
    def update_blind_level(self, session_id: str, level_id: int, small_blind: int,
                           big_blind: int, ante: int = 0) -> CommandResult:
        """修改盲注级别"""
        session = self._require_tournament(session_id)
        entry = BlindLevelInput(small_blind=small_blind, big_blind=big_blind, ante=ante)
        if level_id not in {level.level_id for level in session.blind_schedule.levels}:
            raise ValidationError(f"盲注级别不存在: {level_id}", "BLIND_LEVEL_NOT_FOUND")
        level = session.blind_schedule.update_level(
            level_id,
            small_blind=entry.small_blind,
            big_blind=entry.big_blind,
            ante=entry.ante
        )
        session.update_timestamp()
        return CommandResult.success_result("盲注级别已修改", {'level': level})

    @command_handler
    def remove_blind_level(self, session_id: str, level_id: int) -> CommandResult:
        """删除盲注级别，至少保留一个"""
        session = self._require_tournament(session_id)
        schedule = session.blind_schedule
        if level_id not in {level.level_id for level in schedule.levels}:
            raise ValidationError(f"盲注级别不存在: {level_id}", "BLIND_LEVEL_NOT_FOUND")
        if len(schedule.levels) <= 1:
            raise BusinessRuleViolationError("盲注结构至少需要一个级别", "LAST_BLIND_LEVEL")
        schedule.remove_level(level_id)
        session.update_timestamp()
        return CommandResult.success_result("盲注级别已删除")

    # ==================== 结算 ====================

    @command_handler
    def settle_session(self, session_id: str) -> CommandResult:
        """
        计算结算转账

        余额不平时仍然返回成功，差额放在data['discrepancy']中交给调用方处理。
        """
        session = self._require_session(session_id)
        players = list(session.players.values())
        if self._enable_invariant_checks:
            self._invariants.verify_ledgers(players, session.chip_set)

        result = self._settlement_engine.settle(players)
        if self._enable_invariant_checks:
            self._invariants.verify_settlement(players, result)

        message = "结算完成"
        if result.has_discrepancy:
            message = f"结算完成，但余额不平，差额 {result.discrepancy}"
            self._logger.warning(f"[会话] 会话 {session_id} 对账差额 {result.discrepancy}")
        return CommandResult.success_result(message, {
            'result': result,
            'transfers': result.to_rows(),
            'transfer_count': result.transfer_count,
            'discrepancy': result.discrepancy,
            'has_discrepancy': result.has_discrepancy,
            'unsettled': dict(result.unsettled),
        })

    # ==================== 内部辅助 ====================

    def _require_session(self, session_id: str) -> PokerSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise ValidationError(f"会话不存在: {session_id}", "SESSION_NOT_FOUND")
        return session

    def _require_player(self, session: PokerSession, player_id: str) -> Player:
        player = session.players.get(player_id)
        if player is None:
            raise ValidationError(f"玩家不存在: {player_id}", "PLAYER_NOT_FOUND")
        return player

    def _require_unlocked_chip_set(self, session_id: str) -> PokerSession:
        session = self._require_session(session_id)
        if session.is_chip_set_locked:
            raise BusinessRuleViolationError("有玩家在座时不能修改筹码", "CHIP_SET_LOCKED")
        return session

    def _require_tournament(self, session_id: str) -> PokerSession:
        session = self._require_session(session_id)
        if session.mode != SessionMode.TOURNAMENT:
            raise BusinessRuleViolationError("该操作只适用于锦标赛", "WRONG_SESSION_MODE")
        return session
