"""会话查询服务测试."""

from decimal import Decimal

from poker_manager.application import ResultStatus, SessionMode, SessionQueryService


class TestSessionQueryService:
    """会话查询服务测试类."""

    def _seed_cash_game(self, command_service):
        command_service.create_session(SessionMode.CASH, session_id="s1")
        ana = command_service.add_player("s1", "Ana", 50).data['player_id']
        bia = command_service.add_player("s1", "Bia", 20).data['player_id']
        command_service.record_rebuy("s1", bia, 10)
        command_service.record_cash_out("s1", ana, 30)
        return ana, bia

    def test_session_summary(self, command_service, query_service):
        """测试会话总览."""
        self._seed_cash_game(command_service)
        result = query_service.get_session_summary("s1")

        assert result.success
        summary = result.data
        assert summary.mode == "cash"
        assert summary.player_count == 2
        assert summary.total_bank == Decimal("80.00")
        assert summary.total_paid_out == Decimal("30.00")
        assert summary.balance_sum == Decimal("-50.00")
        assert summary.chip_set_locked

    def test_player_summary(self, command_service, query_service):
        """测试玩家账本摘要."""
        _, bia = self._seed_cash_game(command_service)
        summary = query_service.get_player_summary("s1", bia).data
        chip_set = command_service.get_session("s1").chip_set

        assert summary.name == "Bia"
        assert summary.balance == Decimal("-30.00")
        assert summary.rebuys == 1
        assert summary.transaction_count == 2
        assert chip_set.total_value(summary.chip_counts) == Decimal("30.00")
        assert summary.to_dict()['player_id'] == bia

    def test_unknown_player(self, command_service, query_service):
        """测试不存在的玩家."""
        self._seed_cash_game(command_service)
        result = query_service.get_player_summary("s1", "player_42")
        assert result.status == ResultStatus.VALIDATION_ERROR
        assert result.error_code == "PLAYER_NOT_FOUND"

    def test_chip_totals(self, command_service, query_service):
        """测试整桌筹码统计."""
        self._seed_cash_game(command_service)
        totals = query_service.get_chip_totals("s1").data
        chip_set = command_service.get_session("s1").chip_set

        assert list(totals.keys()) == [1, 2, 3, 4]
        assert chip_set.total_value(totals) == Decimal("80.00")

    def test_prize_pool(self, query_service):
        """测试奖池计算."""
        assert query_service.get_prize_pool().data.total == Decimal("200.00")
        assert query_service.get_prize_pool(6, 50).data.total == Decimal("300.00")

        invalid = query_service.get_prize_pool(1, 20)
        assert invalid.status == ResultStatus.VALIDATION_ERROR
        assert invalid.error_code == "INVALID_PRIZE_POOL"

    def test_blind_levels(self, command_service, query_service):
        """测试盲注结构查询."""
        command_service.create_session(SessionMode.TOURNAMENT, session_id="t1")
        view = query_service.get_blind_levels("t1").data
        assert str(view.current_level) == "25/50"
        assert view.next_level.level_id == 2

        command_service.advance_blind_level("t1")
        assert query_service.get_blind_levels("t1").data.current_index == 1

    def test_unknown_session(self, query_service):
        """测试不存在的会话."""
        result = query_service.get_session_summary("missing")
        assert not result.success
        assert result.error_code == "SESSION_NOT_FOUND"

    def test_without_command_service(self, config_service):
        """测试未注入命令服务."""
        result = SessionQueryService(config_service=config_service).get_chip_totals("s1")
        assert result.error_code == "COMMAND_SERVICE_NOT_INITIALIZED"
