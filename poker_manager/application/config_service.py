#!/usr/bin/env python3
"""
ConfigService - 配置管理服务

负责集中化管理所有牌局配置，包括：
- 筹码面值集合
- 筹码分配策略参数
- 会话规则（容差、不变量检查、锦标赛默认值）
- 日志配置

支持从YAML文件加载额外的配置档案。
"""

import logging
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from ..core.chips import ChipSet, DistributionPolicy
from ..core.money import to_decimal
from .types import QueryResult


class ConfigType(Enum):
    """配置类型枚举"""
    CHIP_SET = "chip_set"
    DISTRIBUTION_POLICY = "distribution_policy"
    SESSION = "session"
    LOGGING = "logging"


def _default_denominations() -> List[Dict[str, Any]]:
    return [
        {'face_value': '0.25', 'color': '#22c55e', 'name': 'Verde'},
        {'face_value': '0.5', 'color': '#ef4444', 'name': 'Vermelha'},
        {'face_value': '1', 'color': '#f5f5f5', 'name': 'Branca'},
        {'face_value': '10', 'color': '#171717', 'name': 'Preta'},
    ]


@dataclass
class ChipSetConfig:
    """筹码面值集合配置"""
    denominations: List[Dict[str, Any]] = field(default_factory=_default_denominations)

    def __post_init__(self):
        """面值列表必须能转换为ChipSet"""
        try:
            self.to_chip_set()
        except (KeyError, TypeError) as e:
            raise ValueError(f"筹码配置缺少字段: {e}")

    def to_chip_set(self) -> ChipSet:
        """转换为核心层的ChipSet，ID按顺序从1开始"""
        return ChipSet.from_values([
            (d['face_value'], d.get('color', ''), d['name']) for d in self.denominations
        ])


@dataclass
class DistributionPolicyConfig:
    """筹码分配策略配置"""
    seed_ratio: str = "0.25"
    large_tier_ratio: str = "0.10"
    mid_tier_ratio: str = "0.01"
    large_share: str = "0.50"
    mid_share: str = "0.30"
    small_share: str = "0.10"
    sub_unit_threshold: str = "1"
    sub_unit_multiple: int = 5
    tolerance: str = "0.01"
    minor_unit_digits: int = 2

    def __post_init__(self):
        """参数必须能构成合法的DistributionPolicy"""
        self.to_policy()

    def to_policy(self) -> DistributionPolicy:
        return DistributionPolicy(**{f.name: getattr(self, f.name) for f in fields(self)})


@dataclass
class SessionConfig:
    """会话规则配置"""
    tolerance: str = "0.01"
    minor_unit_digits: int = 2
    enable_invariant_checks: bool = True
    round_length_minutes: int = 15
    prize_pool_players: int = 10
    prize_pool_buy_in: str = "20"

    def __post_init__(self):
        """验证会话配置"""
        if to_decimal(self.tolerance) < 0:
            raise ValueError(f"tolerance不能为负数: {self.tolerance}")
        if self.round_length_minutes < 1:
            raise ValueError(f"每轮时长至少为1分钟: {self.round_length_minutes}")


@dataclass
class LoggingConfig:
    """日志配置"""
    log_level: str = 'INFO'
    enable_console_logging: bool = True
    enable_file_logging: bool = False
    log_file_path: str = "logs/poker_manager.log"
    log_format: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


_CONFIG_CLASSES = {
    ConfigType.CHIP_SET: ChipSetConfig,
    ConfigType.DISTRIBUTION_POLICY: DistributionPolicyConfig,
    ConfigType.SESSION: SessionConfig,
    ConfigType.LOGGING: LoggingConfig,
}


class ConfigService:
    """配置管理服务"""

    def __init__(self):
        """初始化配置服务"""
        self.logger = logging.getLogger(__name__)
        self._configs: Dict[ConfigType, Dict[str, Any]] = {}
        self._load_default_configs()

    def _load_default_configs(self):
        """加载默认配置"""
        self._configs[ConfigType.CHIP_SET] = {
            'default': ChipSetConfig(),
            'tournament': ChipSetConfig(denominations=[
                {'face_value': '25', 'color': '#22c55e', 'name': 'Verde'},
                {'face_value': '100', 'color': '#171717', 'name': 'Preta'},
                {'face_value': '500', 'color': '#8b5cf6', 'name': 'Roxa'},
                {'face_value': '1000', 'color': '#eab308', 'name': 'Amarela'},
            ]),
        }
        self._configs[ConfigType.DISTRIBUTION_POLICY] = {
            'default': DistributionPolicyConfig(),
        }
        self._configs[ConfigType.SESSION] = {
            'default': SessionConfig(),
            'strict': SessionConfig(tolerance="0.00"),
        }
        self._configs[ConfigType.LOGGING] = {
            'default': LoggingConfig(),
            'debug': LoggingConfig(log_level='DEBUG'),
            'production': LoggingConfig(log_level='WARNING'),
        }
        self.logger.info("默认配置加载完成")

    def _get_profile(self, config_type: ConfigType, profile: str) -> QueryResult[Any]:
        try:
            config_profiles = self._configs.get(config_type, {})
            if profile not in config_profiles:
                self.logger.warning(f"未找到{config_type.value}配置 '{profile}'，使用默认配置")
                profile = "default"
            config = config_profiles.get(profile) or _CONFIG_CLASSES[config_type]()
            return QueryResult.success_result(config)
        except Exception as e:
            return QueryResult.failure_result(
                f"获取{config_type.value}配置失败: {str(e)}",
                error_code=f"GET_{config_type.name}_CONFIG_FAILED"
            )

    def get_chip_set_config(self, profile: str = "default") -> QueryResult[ChipSetConfig]:
        """
        获取筹码面值集合配置

        Args:
            profile: 配置档案名 (default, tournament)

        Returns:
            查询结果，包含筹码面值集合配置
        """
        return self._get_profile(ConfigType.CHIP_SET, profile)

    def get_chip_set(self, profile: str = "default") -> QueryResult[ChipSet]:
        """获取转换好的ChipSet"""
        result = self.get_chip_set_config(profile)
        if not result.success:
            return result
        try:
            return QueryResult.success_result(result.data.to_chip_set())
        except (KeyError, TypeError, ValueError) as e:
            return QueryResult.validation_error(
                f"筹码配置无效: {str(e)}",
                error_code="INVALID_CHIP_SET_CONFIG"
            )

    def get_distribution_policy(self, profile: str = "default") -> QueryResult[DistributionPolicy]:
        """
        获取筹码分配策略

        Args:
            profile: 配置档案名

        Returns:
            查询结果，包含DistributionPolicy
        """
        result = self._get_profile(ConfigType.DISTRIBUTION_POLICY, profile)
        if not result.success:
            return result
        try:
            return QueryResult.success_result(result.data.to_policy())
        except ValueError as e:
            return QueryResult.validation_error(
                f"分配策略配置无效: {str(e)}",
                error_code="INVALID_DISTRIBUTION_POLICY"
            )

    def get_session_config(self, profile: str = "default") -> QueryResult[SessionConfig]:
        """获取会话规则配置"""
        return self._get_profile(ConfigType.SESSION, profile)

    def get_logging_config(self, profile: str = "default") -> QueryResult[LoggingConfig]:
        """获取日志配置"""
        return self._get_profile(ConfigType.LOGGING, profile)

    def update_config(self, config_type: ConfigType, profile: str, updates: Dict[str, Any]) -> QueryResult[bool]:
        """
        更新配置

        Args:
            config_type: 配置类型
            profile: 配置档案名
            updates: 更新的配置项

        Returns:
            查询结果，包含更新是否成功
        """
        config_profiles = self._configs.get(config_type)
        if config_profiles is None:
            return QueryResult.failure_result(
                f"配置类型 {config_type} 不存在",
                error_code="CONFIG_TYPE_NOT_FOUND"
            )
        if profile not in config_profiles:
            return QueryResult.failure_result(
                f"配置档案 {profile} 不存在",
                error_code="CONFIG_PROFILE_NOT_FOUND"
            )

        current_config = config_profiles[profile]
        known = {f.name for f in fields(current_config)}
        for key in sorted(set(updates) - known):
            self.logger.warning(f"配置项 {key} 不存在于 {config_type.value}.{profile} 中")
        try:
            # replace会重新执行__post_init__中的校验
            updated = replace(current_config, **{k: v for k, v in updates.items() if k in known})
        except (TypeError, ValueError) as e:
            self.logger.warning(f"配置 {config_type.value}.{profile} 更新被拒绝: {e}")
            return QueryResult.validation_error(
                f"配置值无效: {str(e)}",
                error_code="INVALID_CONFIG_VALUE"
            )
        config_profiles[profile] = updated

        self.logger.info(f"配置 {config_type.value}.{profile} 更新成功")
        return QueryResult.success_result(True)

    def list_available_profiles(self, config_type: ConfigType) -> QueryResult[List[str]]:
        """列出可用的配置档案"""
        if config_type not in self._configs:
            return QueryResult.failure_result(
                f"配置类型 {config_type} 不存在",
                error_code="CONFIG_TYPE_NOT_FOUND"
            )
        return QueryResult.success_result(list(self._configs[config_type].keys()))

    def load_profiles_from_yaml(self, config_file: Union[str, Path]) -> QueryResult[List[str]]:
        """
        从YAML文件加载额外的配置档案

        文件格式::

            chip_set:
              home_game:
                denominations:
                  - {face_value: 0.5, color: "#ef4444", name: Vermelha}
            session:
              relaxed:
                enable_invariant_checks: false

        Args:
            config_file: YAML文件路径

        Returns:
            查询结果，包含加载成功的档案名（"类型.档案"）
        """
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                raw = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            self.logger.warning(f"无法加载配置文件 {config_file}: {e}，保留默认配置")
            return QueryResult.failure_result(
                f"无法加载配置文件: {str(e)}",
                error_code="CONFIG_FILE_LOAD_FAILED"
            )
        if not isinstance(raw, dict):
            self.logger.warning(f"配置文件 {config_file} 的顶层必须是映射，保留默认配置")
            return QueryResult.failure_result(
                "配置文件格式无效",
                error_code="CONFIG_FILE_INVALID"
            )

        loaded = []
        for type_key, profiles in raw.items():
            try:
                config_type = ConfigType(type_key)
            except ValueError:
                self.logger.warning(f"忽略未知的配置类型: {type_key}")
                continue
            if not isinstance(profiles, dict):
                self.logger.warning(f"配置类型 {type_key} 的内容必须是映射")
                continue
            config_cls = _CONFIG_CLASSES[config_type]
            known = {f.name for f in fields(config_cls)}
            for profile, values in profiles.items():
                values = values or {}
                unknown = set(values) - known
                if unknown:
                    self.logger.warning(f"{type_key}.{profile} 中的未知配置项被忽略: {sorted(unknown)}")
                try:
                    config = config_cls(**{k: v for k, v in values.items() if k in known})
                except (TypeError, ValueError) as e:
                    self.logger.warning(f"{type_key}.{profile} 配置无效: {e}")
                    continue
                self._configs[config_type][profile] = config
                loaded.append(f"{type_key}.{profile}")

        self.logger.info(f"从 {config_file} 加载配置档案: {loaded}")
        return QueryResult.success_result(loaded)

    def configure_logging(self, profile: str = "default") -> QueryResult[bool]:
        """
        按日志配置设置 poker_manager 包的日志处理器

        Args:
            profile: 日志配置档案名
        """
        result = self.get_logging_config(profile)
        if not result.success:
            return QueryResult.failure_result(result.message, error_code=result.error_code)
        config = result.data

        package_logger = logging.getLogger("poker_manager")
        package_logger.setLevel(config.log_level.upper())
        for handler in list(package_logger.handlers):
            package_logger.removeHandler(handler)
            handler.close()

        formatter = logging.Formatter(config.log_format)
        if config.enable_console_logging:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(formatter)
            package_logger.addHandler(console_handler)
        if config.enable_file_logging:
            log_path = Path(config.log_file_path)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, encoding='utf-8')
            file_handler.setFormatter(formatter)
            package_logger.addHandler(file_handler)
        return QueryResult.success_result(True)


# 全局单例
_config_service_instance: Optional[ConfigService] = None


def get_config_service() -> ConfigService:
    """
    获取配置服务的全局单例

    Returns:
        ConfigService: 配置服务实例
    """
    global _config_service_instance
    if _config_service_instance is None:
        _config_service_instance = ConfigService()
    return _config_service_instance
