"""
现金局集成测试

从建桌、买入、重买、兑现到结算，走完一整场现金局。
"""

from decimal import Decimal

import pytest

from poker_manager.application import ConfigService, SessionCommandService, SessionMode, SessionQueryService
from poker_manager.core.settlement import apply_transfers


@pytest.mark.integration
class TestCashSessionFlow:
    """现金局完整流程测试类."""

    def setup_method(self):
        """测试前设置"""
        config_service = ConfigService()
        self.commands = SessionCommandService(config_service=config_service)
        self.queries = SessionQueryService(self.commands, config_service)
        self.session_id = self.commands.create_session(SessionMode.CASH).data['session_id']

    def test_full_cash_game(self):
        """测试完整现金局: 桌上筹码总值等于总银行，结算后所有人余额归零."""
        sid = self.session_id
        # 开局前加一种面值5的筹码
        assert self.commands.add_denomination(sid, "5", "Azul", "#3b82f6").success

        ana = self.commands.add_player(sid, "Ana", 50).data['player_id']
        bia = self.commands.add_player(sid, "Bia", "37.50").data['player_id']
        caio = self.commands.add_player(sid, "Caio", 20).data['player_id']
        dani = self.commands.add_player(sid, "Dani", 20).data['player_id']
        assert self.commands.record_rebuy(sid, caio, 20).success
        assert self.commands.record_add_on(sid, dani, "12.25").success

        # 有玩家在座，筹码面值锁定
        assert not self.commands.add_denomination(sid, "100", "Ouro").success

        summary = self.queries.get_session_summary(sid).data
        assert summary.total_bank == Decimal("159.75")
        chip_set = self.commands.get_session(sid).chip_set
        totals = self.queries.get_chip_totals(sid).data
        assert chip_set.total_value(totals) == summary.total_bank

        # 离桌兑现，总额等于总银行
        for player_id, cash in [(ana, "95.25"), (bia, "0.50"), (caio, "14"), (dani, 50)]:
            assert self.commands.record_cash_out(sid, player_id, cash).success

        summary = self.queries.get_session_summary(sid).data
        assert summary.balance_sum == Decimal("0.00")

        settlement = self.commands.settle_session(sid)
        assert settlement.success
        assert not settlement.data['has_discrepancy']
        result = settlement.data['result']
        assert result.transfer_count <= 3

        players = self.commands.get_session(sid).players.values()
        final = apply_transfers({p.player_id: p.balance for p in players}, result.transfers)
        assert all(balance == 0 for balance in final.values())

    def test_forgotten_cash_out_is_reported(self):
        """测试漏记一笔兑现时，结算报告差额而不是悄悄修正."""
        sid = self.session_id
        ana = self.commands.add_player(sid, "Ana", 40).data['player_id']
        self.commands.add_player(sid, "Bia", 40)
        self.commands.record_cash_out(sid, ana, 70)

        settlement = self.commands.settle_session(sid)
        assert settlement.success
        assert settlement.data['has_discrepancy']
        assert settlement.data['discrepancy'] == Decimal("-10.00")
        assert "差额" in settlement.message

    def test_reset_unlocks_chip_set(self):
        """测试重置会话后可以再修改筹码."""
        sid = self.session_id
        self.commands.add_player(sid, "Ana", 40)
        assert not self.commands.remove_denomination(sid, 1).success
        self.commands.reset_session(sid)
        assert self.commands.remove_denomination(sid, 1).success
