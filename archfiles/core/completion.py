"""
Completion callback adapters.

Runs a coroutine as a task and reports its outcome to a caller supplied
callback exactly once, for callers that prefer continuations over await.
"""
import asyncio
from typing import Any, Awaitable, Callable, Optional, Tuple

from .exceptions import ArchFilesError, InvalidRequestError, OperationCancelledError, UnknownError
from .logging import get_logger

logger = get_logger('archfiles.completion')


class Completion:
    """
    Wraps a callback so it can be fired at most once.

    Example:
        >>> done = Completion(lambda ok, err: print(ok, err))
        >>> done(True, None)
        >>> done(True, None)  # RuntimeError
    """

    def __init__(self, callback: Callable[..., Any]):
        if not callable(callback):
            raise TypeError("completion must be callable")
        self._callback = callback
        self._fired = False

    @property
    def fired(self) -> bool:
        return self._fired

    def __call__(self, *args) -> None:
        if self._fired:
            raise RuntimeError("Completion already fired")
        self._fired = True
        self._callback(*args)


def to_error(exc: BaseException) -> ArchFilesError:
    """Convert any exception raised by an operation into an ArchFilesError."""
    if isinstance(exc, ArchFilesError):
        return exc
    if isinstance(exc, ValueError):
        return InvalidRequestError(str(exc))
    error = UnknownError(f"{type(exc).__name__}: {exc}")
    error.__cause__ = exc
    return error


def run_with_completion(
    operation: Awaitable[Any],
    on_success: Callable[[Any], Tuple],
    on_failure: Callable[[ArchFilesError], Tuple],
    completion: Callable[..., Any],
    name: Optional[str] = None
) -> 'asyncio.Task':
    """
    Schedule an operation and deliver its outcome to a completion.

    Args:
        operation: Coroutine performing the work
        on_success: Maps the operation's result to completion arguments
        on_failure: Maps an error to completion arguments
        completion: Caller callback, invoked exactly once
        name: Optional task name

    Returns:
        The scheduled task. Cancelling it delivers OperationCancelledError.
    """
    done = Completion(completion)

    async def runner():
        try:
            result = await operation
        except asyncio.CancelledError:
            done(*on_failure(OperationCancelledError("Operation cancelled")))
            raise
        except Exception as e:
            error = to_error(e)
            logger.debug(f"Operation {name or ''} failed: {error!r}")
            done(*on_failure(error))
            return
        done(*on_success(result))

    def finalize(task: 'asyncio.Task') -> None:
        # Cancelled before the runner got to start
        if task.cancelled() and not done.fired:
            if asyncio.iscoroutine(operation):
                operation.close()
            done(*on_failure(OperationCancelledError("Operation cancelled")))

    task = asyncio.get_running_loop().create_task(runner(), name=name)
    task.add_done_callback(finalize)
    return task
