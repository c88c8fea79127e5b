"""配置服务测试."""

import logging
from decimal import Decimal

import pytest

from poker_manager.application import ConfigService, ConfigType, ResultStatus, get_config_service
from poker_manager.core.chips import DistributionPolicy


class TestConfigService:
    """配置服务测试类."""

    def setup_method(self):
        """测试前设置"""
        self.config_service = ConfigService()

    def test_default_chip_set(self):
        """测试默认筹码面值."""
        result = self.config_service.get_chip_set()
        assert result.success
        chip_set = result.data
        assert [d.face_value for d in chip_set.by_id()] == [
            Decimal("0.25"), Decimal("0.5"), Decimal("1"), Decimal("10")
        ]
        assert chip_set.get(1).name == "Verde"

    def test_tournament_chip_set(self):
        """测试锦标赛筹码面值."""
        chip_set = self.config_service.get_chip_set("tournament").data
        assert [int(d.face_value) for d in chip_set.by_id()] == [25, 100, 500, 1000]

    def test_unknown_profile_falls_back_to_default(self):
        """测试未知档案使用默认配置."""
        result = self.config_service.get_session_config("does_not_exist")
        assert result.success
        assert result.data.tolerance == "0.01"

    def test_distribution_policy(self):
        """测试分配策略配置转换."""
        policy = self.config_service.get_distribution_policy().data
        assert policy == DistributionPolicy()

    def test_strict_session_profile(self):
        """测试严格档案的容差为0."""
        assert self.config_service.get_session_config("strict").data.tolerance == "0.00"

    def test_update_config(self):
        """测试更新配置."""
        result = self.config_service.update_config(ConfigType.SESSION, "default", {'round_length_minutes': 20})
        assert result.success
        assert self.config_service.get_session_config().data.round_length_minutes == 20

        missing = self.config_service.update_config(ConfigType.SESSION, "nope", {})
        assert not missing.success
        assert missing.error_code == "CONFIG_PROFILE_NOT_FOUND"

    def test_list_available_profiles(self):
        """测试列出配置档案."""
        profiles = self.config_service.list_available_profiles(ConfigType.LOGGING).data
        assert set(profiles) == {"default", "debug", "production"}

    def test_invalid_chip_set_update_rejected(self):
        """测试无效的筹码配置不会被写入."""
        result = self.config_service.update_config(
            ConfigType.CHIP_SET, "default", {'denominations': [{'face_value': '-1', 'name': 'Bad'}]}
        )
        assert result.status == ResultStatus.VALIDATION_ERROR
        assert result.error_code == "INVALID_CONFIG_VALUE"
        assert len(self.config_service.get_chip_set().data) == 4

    def test_update_config_validates_session_values(self):
        """测试更新会话配置时重新校验."""
        result = self.config_service.update_config(ConfigType.SESSION, "default", {'tolerance': '-1'})
        assert not result.success
        assert result.error_code == "INVALID_CONFIG_VALUE"
        assert self.config_service.get_session_config().data.tolerance == "0.01"

    def test_update_config_validates_policy_values(self):
        """测试更新分配策略时重新校验."""
        result = self.config_service.update_config(
            ConfigType.DISTRIBUTION_POLICY, "default", {'large_share': '2'}
        )
        assert result.error_code == "INVALID_CONFIG_VALUE"
        assert self.config_service.get_distribution_policy().data == DistributionPolicy()

    def test_update_replaces_profile_object(self):
        """测试更新生成新的配置对象，已取出的配置不变."""
        before = self.config_service.get_session_config().data
        self.config_service.update_config(ConfigType.SESSION, "default", {'round_length_minutes': 30})
        assert before.round_length_minutes == 15
        assert self.config_service.get_session_config().data.round_length_minutes == 30

    def test_singleton(self):
        """测试全局单例."""
        assert get_config_service() is get_config_service()


class TestYamlProfiles:
    """YAML配置档案测试类."""

    def test_load_profiles(self, tmp_path):
        """测试从YAML加载额外档案."""
        config_file = tmp_path / "poker.yaml"
        config_file.write_text(
            "chip_set:\n"
            "  home_game:\n"
            "    denominations:\n"
            "      - {face_value: '0.5', color: '#ef4444', name: Vermelha}\n"
            "      - {face_value: '5', color: '#3b82f6', name: Azul}\n"
            "session:\n"
            "  relaxed:\n"
            "    enable_invariant_checks: false\n"
            "    bogus_key: 1\n"
            "unknown_type:\n"
            "  x: {}\n",
            encoding="utf-8"
        )
        config_service = ConfigService()
        result = config_service.load_profiles_from_yaml(config_file)

        assert result.success
        assert sorted(result.data) == ["chip_set.home_game", "session.relaxed"]
        chip_set = config_service.get_chip_set("home_game").data
        assert [d.name for d in chip_set.by_id()] == ["Vermelha", "Azul"]
        assert config_service.get_session_config("relaxed").data.enable_invariant_checks is False

    def test_missing_file(self, tmp_path):
        """测试文件不存在时保留默认配置."""
        result = ConfigService().load_profiles_from_yaml(tmp_path / "missing.yaml")
        assert not result.success
        assert result.error_code == "CONFIG_FILE_LOAD_FAILED"

    def test_invalid_yaml(self, tmp_path):
        """测试YAML语法错误."""
        config_file = tmp_path / "broken.yaml"
        config_file.write_text("session: [unclosed", encoding="utf-8")
        result = ConfigService().load_profiles_from_yaml(config_file)
        assert not result.success

    def test_top_level_must_be_mapping(self, tmp_path):
        """测试顶层不是映射时失败."""
        config_file = tmp_path / "list.yaml"
        config_file.write_text("- a\n- b\n", encoding="utf-8")
        result = ConfigService().load_profiles_from_yaml(config_file)
        assert result.error_code == "CONFIG_FILE_INVALID"

    def test_invalid_profile_values_skipped(self, tmp_path):
        """测试无效的档案值被跳过."""
        config_file = tmp_path / "bad.yaml"
        config_file.write_text(
            "session:\n  bad:\n    round_length_minutes: 0\n"
            "distribution_policy:\n  greedy_heavy:\n    large_share: 2\n",
            encoding="utf-8"
        )
        result = ConfigService().load_profiles_from_yaml(config_file)
        assert result.success
        assert result.data == []


class TestConfigureLogging:
    """日志配置测试类."""

    def teardown_method(self):
        """测试后清理"""
        package_logger = logging.getLogger("poker_manager")
        for handler in list(package_logger.handlers):
            package_logger.removeHandler(handler)
            handler.close()
        package_logger.setLevel(logging.NOTSET)

    def test_console_logging(self):
        """测试控制台日志."""
        result = ConfigService().configure_logging("debug")
        assert result.success
        package_logger = logging.getLogger("poker_manager")
        assert package_logger.level == logging.DEBUG
        assert len(package_logger.handlers) == 1

    def test_file_logging(self, tmp_path):
        """测试文件日志."""
        config_service = ConfigService()
        log_file = tmp_path / "logs" / "session.log"
        config_service.update_config(ConfigType.LOGGING, "default", {
            'enable_file_logging': True,
            'log_file_path': str(log_file),
        })
        assert config_service.configure_logging().success
        logging.getLogger("poker_manager.test").warning("hello")
        for handler in logging.getLogger("poker_manager").handlers:
            handler.flush()
        assert "hello" in log_file.read_text(encoding="utf-8")
