"""
`Logger.io`: call logging for use cases, repositories and adapters.

Arguments and return values are logged at DEBUG (secrets masked, long reprs
truncated). A failure is logged once, by the innermost decorated call it
passes through: booking errors (`CustomBaseError`) as a one-line ERROR with
their code, anything unexpected with a traceback.
"""

from functools import wraps
from inspect import iscoroutinefunction
from typing import TYPE_CHECKING, Any, Callable, ParamSpec, TypeVar, cast, overload


if TYPE_CHECKING:
    from loguru import Logger as LoguruLogger

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import CustomBaseError
from src.platform.logging.loguru_io_config import (
    ExtraField,
    call_depth_var,
    custom_logger,
)
from src.platform.logging.loguru_io_utils import (
    build_call_target_func_path,
    get_chain_start_time,
    mask_sensitive,
    normalize_args_kwargs,
    reset_call_depth,
    should_mask_keyword,
    truncate_content,
)

_F = TypeVar('_F', bound=Callable[..., Any])

# hook -> wrapper -> the decorated function's call site
_CALLER_DEPTH = 2


class LoguruIO:
    def __init__(
        self, custom_logger: 'LoguruLogger', *, reraise: bool = True, truncate_content: bool = True
    ) -> None:
        self._custom_logger = custom_logger
        self.reraise = reraise
        self.truncate_content = truncate_content
        self.call_target = ''

    def _logger(self) -> 'LoguruLogger':
        return self._custom_logger.bind(
            **{
                ExtraField.CALL_TARGET: self.call_target,
                ExtraField.CHAIN_START_TIME: get_chain_start_time(),
            }
        ).opt(depth=_CALLER_DEPTH)

    def render(self, data: Any) -> Any:
        if isinstance(data, dict):
            rendered: Any = {
                key: self.render(should_mask_keyword(key, value)) for key, value in data.items()
            }
        elif isinstance(data, list | tuple):
            rendered = type(data)(self.render(item) for item in data)
        else:
            rendered = mask_sensitive(data)
        return truncate_content(rendered) if self.truncate_content else rendered

    def on_enter(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        call_depth_var.set(call_depth_var.get() + 1)
        if settings.DEBUG:
            self._logger().debug(f'args: {self.render(args)}, kwargs: {self.render(kwargs)}')

    def on_return(self, value: Any) -> Any:
        if settings.DEBUG:
            self._logger().debug(f'return: {self.render(value)}')
        return value

    def on_error(self, e: Exception) -> None:
        if getattr(e, '_has_logged', False):
            return
        e._has_logged = True  # type: ignore[attr-defined]
        if isinstance(e, CustomBaseError):
            self._logger().error(f'{type(e).__name__}[{e.code}]: {e}')
        else:
            self._logger().exception(f'{type(e).__name__}: {e}')

    def __call__(self, func: _F) -> _F:
        self.call_target = build_call_target_func_path(func)

        if iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                try:
                    self.on_enter(args, kwargs)
                    args, kwargs = normalize_args_kwargs(func, *args, **kwargs)
                    return self.on_return(await func(*args, **kwargs))
                except Exception as e:
                    self.on_error(e)
                    if self.reraise:
                        raise
                    return None
                finally:
                    reset_call_depth()

            return cast(_F, async_wrapper)

        @wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                self.on_enter(args, kwargs)
                args, kwargs = normalize_args_kwargs(func, *args, **kwargs)
                return self.on_return(func(*args, **kwargs))
            except Exception as e:
                self.on_error(e)
                if self.reraise:
                    raise
                return None
            finally:
                reset_call_depth()

        return cast(_F, sync_wrapper)


_P = ParamSpec('_P')
_T = TypeVar('_T')


class Logger:
    base = custom_logger

    @overload
    @staticmethod
    def io(func: Callable[_P, _T]) -> Callable[_P, _T]: ...

    @overload
    @staticmethod
    def io(func: None = ..., *, reraise: bool = ..., truncate_content: bool = ...) -> LoguruIO: ...

    @staticmethod
    def io(
        func: Callable[_P, _T] | None = None, *, reraise: bool = True, truncate_content: bool = True
    ) -> Callable[_P, _T] | LoguruIO:
        decorator = LoguruIO(custom_logger, reraise=reraise, truncate_content=truncate_content)
        return decorator(func) if func else decorator
