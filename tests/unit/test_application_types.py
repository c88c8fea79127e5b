"""应用层结果类型测试."""

import pytest

from poker_manager.application import (
    ApplicationError,
    BusinessRuleViolationError,
    CommandResult,
    QueryResult,
    ResultStatus,
    ValidationError,
)


class TestCommandResult:
    """命令结果测试类."""

    def test_from_error_keeps_status_and_code(self):
        """测试异常自带的状态与错误码被保留."""
        result = CommandResult.from_error(BusinessRuleViolationError("筹码已锁定", "CHIP_SET_LOCKED"))
        assert not result.success
        assert result.status == ResultStatus.BUSINESS_RULE_VIOLATION
        assert result.error_code == "CHIP_SET_LOCKED"
        assert result.message == "筹码已锁定"

    def test_base_error_is_plain_failure(self):
        """测试基类异常对应FAILURE."""
        result = CommandResult.from_error(ApplicationError("配置缺失", "MISSING"))
        assert result.status == ResultStatus.FAILURE


class TestQueryResultUnwrap:
    """查询结果解包测试类."""

    def test_success_returns_data(self):
        """测试成功时返回数据."""
        assert QueryResult.success_result([1, 2]).unwrap() == [1, 2]

    def test_validation_failure_raises_validation_error(self):
        """测试校验失败解包为ValidationError."""
        with pytest.raises(ValidationError) as exc_info:
            QueryResult.validation_error("策略无效", "INVALID_DISTRIBUTION_POLICY").unwrap()
        assert exc_info.value.error_code == "INVALID_DISTRIBUTION_POLICY"
        assert exc_info.value.status == ResultStatus.VALIDATION_ERROR

    def test_generic_failure_raises_application_error(self):
        """测试普通失败解包为ApplicationError."""
        with pytest.raises(ApplicationError) as exc_info:
            QueryResult.failure_result("命令服务未初始化", "COMMAND_SERVICE_NOT_INITIALIZED").unwrap()
        assert not isinstance(exc_info.value, ValidationError)
        assert exc_info.value.error_code == "COMMAND_SERVICE_NOT_INITIALIZED"
