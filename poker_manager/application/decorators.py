"""
Decorators for application layer functionality.

把服务方法中抛出的异常统一转换为CommandResult，调用方永远拿到结果对象。
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from pydantic import ValidationError as PydanticValidationError

from ..core.invariant import InvariantError
from .types import ApplicationError, CommandResult

F = TypeVar('F', bound=Callable[..., Any])

logger = logging.getLogger(__name__)


def command_handler(func: F) -> F:
    """
    Decorator mapping exceptions raised by a command to a CommandResult.

    - pydantic校验失败 / ValueError / ArithmeticError -> VALIDATION_ERROR
    - ApplicationError -> 异常自带的status
    - InvariantError -> SYSTEM_ERROR
    """
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        name = func.__name__
        try:
            return func(self, *args, **kwargs)
        except PydanticValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(loc) for loc in first.get('loc', ()))
            message = f"输入无效: {field} {first.get('msg', '')}".strip()
            logger.warning(f"[会话] {name} 输入无效: {e.errors()}")
            return CommandResult.validation_error(message, error_code="INVALID_INPUT")
        except ApplicationError as e:
            logger.warning(f"[会话] {name} 被拒绝 ({e.status.name}): {e.message}")
            return CommandResult.from_error(e)
        except InvariantError as e:
            logger.error(f"[会话] {name} 违反不变量: {e}")
            return CommandResult.system_error(str(e), error_code="INVARIANT_VIOLATION")
        except (ValueError, ArithmeticError) as e:
            logger.warning(f"[会话] {name} 参数无效: {e}")
            return CommandResult.validation_error(str(e), error_code="INVALID_VALUE")

    return wrapper
