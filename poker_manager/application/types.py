"""
Application Layer Types - 应用层类型定义

命令和查询都返回结果对象；服务内部用ApplicationError的子类表达失败，
每个子类自带对应的ResultStatus，由command_handler或unwrap()在两种形式之间转换。
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar('T')


class ResultStatus(Enum):
    """操作结果状态"""
    SUCCESS = auto()
    FAILURE = auto()                    # 配置缺失等运行环境问题
    VALIDATION_ERROR = auto()           # 输入无效或引用了不存在的会话/玩家/筹码
    BUSINESS_RULE_VIOLATION = auto()    # 输入有效但当前状态不允许
    SYSTEM_ERROR = auto()               # 不变量被破坏，账目不可信


class ApplicationError(Exception):
    """应用层异常基类"""
    status = ResultStatus.FAILURE

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code


class ValidationError(ApplicationError):
    """输入无效"""
    status = ResultStatus.VALIDATION_ERROR


class BusinessRuleViolationError(ApplicationError):
    """违反会话规则（筹码已锁定、玩家已有交易、模式不符等）"""
    status = ResultStatus.BUSINESS_RULE_VIOLATION


_ERRORS_BY_STATUS = {
    ResultStatus.VALIDATION_ERROR: ValidationError,
    ResultStatus.BUSINESS_RULE_VIOLATION: BusinessRuleViolationError,
}


def error_for(status: ResultStatus, message: str, error_code: Optional[str] = None) -> ApplicationError:
    """按结果状态构造对应的异常"""
    return _ERRORS_BY_STATUS.get(status, ApplicationError)(message, error_code)


@dataclass(frozen=True)
class CommandResult:
    """命令执行结果，data中只放调用方可以随意修改的副本"""
    success: bool
    status: ResultStatus
    message: str = ""
    error_code: Optional[str] = None
    data: Optional[Dict[str, Any]] = None

    @classmethod
    def success_result(cls, message: str = "操作成功", data: Optional[Dict[str, Any]] = None) -> 'CommandResult':
        return cls(success=True, status=ResultStatus.SUCCESS, message=message, data=data)

    @classmethod
    def failure_result(cls, message: str, error_code: Optional[str] = None,
                       status: ResultStatus = ResultStatus.FAILURE) -> 'CommandResult':
        return cls(success=False, status=status, message=message, error_code=error_code)

    @classmethod
    def from_error(cls, error: ApplicationError) -> 'CommandResult':
        """把服务内部抛出的ApplicationError转换为失败结果"""
        return cls.failure_result(error.message, error.error_code, error.status)

    @classmethod
    def validation_error(cls, message: str, error_code: Optional[str] = None) -> 'CommandResult':
        return cls.failure_result(message, error_code, ResultStatus.VALIDATION_ERROR)

    @classmethod
    def system_error(cls, message: str, error_code: Optional[str] = None) -> 'CommandResult':
        return cls.failure_result(message, error_code, ResultStatus.SYSTEM_ERROR)


@dataclass(frozen=True)
class QueryResult(Generic[T]):
    """查询结果"""
    success: bool
    status: ResultStatus
    data: Optional[T] = None
    message: str = ""
    error_code: Optional[str] = None

    @classmethod
    def success_result(cls, data: T, message: str = "查询成功") -> 'QueryResult[T]':
        return cls(success=True, status=ResultStatus.SUCCESS, data=data, message=message)

    @classmethod
    def failure_result(cls, message: str, error_code: Optional[str] = None,
                       status: ResultStatus = ResultStatus.FAILURE) -> 'QueryResult[T]':
        return cls(success=False, status=status, message=message, error_code=error_code)

    @classmethod
    def validation_error(cls, message: str, error_code: Optional[str] = None) -> 'QueryResult[T]':
        return cls.failure_result(message, error_code, ResultStatus.VALIDATION_ERROR)

    def unwrap(self) -> T:
        """
        返回查询数据

        Raises:
            ApplicationError: 查询失败时，按status抛出对应的子类，error_code保持不变
        """
        if not self.success:
            raise error_for(self.status, self.message, self.error_code)
        return self.data
