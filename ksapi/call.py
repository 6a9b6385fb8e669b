"""
Cancellable single-result calls.

Every client operation returns a ServiceCall: a cold, single-subscriber
carrier that runs its work only once awaited, started or subscribed, and
ends in exactly one terminal state.

State machine::

    IDLE -> BUILT -> IN_FLIGHT -> COMPLETED | FAILED | CANCELLED
      \\-> FAILED (construction failed, no work is ever started)
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Generator, Generic, Optional, TypeVar

from .exceptions import ErrorClassifier, ServiceError

logger = logging.getLogger(__name__)

T = TypeVar("T")
P = TypeVar("P")


class CallState(str, Enum):
    """Lifecycle states of a ServiceCall."""

    IDLE = "idle"
    BUILT = "built"
    IN_FLIGHT = "in_flight"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (CallState.COMPLETED, CallState.FAILED, CallState.CANCELLED)


class ServiceCall(Generic[T]):
    """
    Cold, cancellable computation yielding one value or one ServiceError.

    Examples:
        Awaiting directly:
        ```python
        project = await service.request(route, Project)
        ```

        Running in the background and cancelling:
        ```python
        call = service.fetch(query, UserEnvelope)
        call.subscribe(on_value=show, on_error=report)
        ...
        call.cancel()  # no callback fires after this
        ```
    """

    def __init__(self, description: str = "call") -> None:
        self.description = description
        self._state = CallState.IDLE
        self._work: Optional[Callable[[], Awaitable[T]]] = None
        self._task: Optional[asyncio.Task[T]] = None
        self._error: Optional[ServiceError] = None
        self._value: Optional[T] = None
        self._subscribed = False
        self._cancel_requested = False

    @classmethod
    def prepare(
        cls,
        build: Callable[[], P],
        perform: Callable[[P], Awaitable[T]],
        description: str = "call",
    ) -> "ServiceCall[T]":
        """
        Run the construction stage now and defer the network stage.

        Args:
            build: Synchronous construction step (request building, input encoding)
            perform: Coroutine function run with the built value once the call starts
            description: Label used in logs

        Returns:
            A BUILT call, or a FAILED one if ``build`` raised a ServiceError
        """
        call: ServiceCall[T] = cls(description)
        try:
            built = build()
        except ServiceError as e:
            call._fail(e)
            return call

        call._work = lambda: perform(built)
        call._transition(CallState.BUILT)
        return call

    @classmethod
    def failed(cls, error: ServiceError, description: str = "call") -> "ServiceCall[T]":
        """A call that terminates with ``error`` without doing any work."""
        call: ServiceCall[T] = cls(description)
        call._fail(error)
        return call

    @property
    def state(self) -> CallState:
        return self._state

    @property
    def error(self) -> Optional[ServiceError]:
        return self._error

    def _transition(self, state: CallState) -> None:
        logger.debug("%s: %s -> %s", self.description, self._state.value, state.value)
        self._state = state

    def _fail(self, error: ServiceError) -> None:
        self._error = error
        self._transition(CallState.FAILED)

    def _claim(self) -> None:
        if self._subscribed:
            raise RuntimeError(f"{self.description} already has a subscriber")
        self._subscribed = True

    async def _run(self) -> T:
        assert self._work is not None
        try:
            value = await self._work()
        except asyncio.CancelledError:
            self._transition(CallState.CANCELLED)
            raise
        except Exception as e:
            error = ErrorClassifier.classify(e)
            self._fail(error)
            if error is e:
                raise
            raise error from e
        self._value = value
        self._transition(CallState.COMPLETED)
        return value

    def start(self) -> Optional["asyncio.Task[T]"]:
        """
        Start the work on the running event loop.

        Returns:
            The task running the call, or None if the call already failed
            during construction. Starting twice returns the same task.
        """
        if self._task is not None:
            return self._task
        if self._state is not CallState.BUILT:
            return None

        self._task = asyncio.ensure_future(self._run())
        self._task.add_done_callback(self._settle)
        self._transition(CallState.IN_FLIGHT)
        return self._task

    def _settle(self, done: "asyncio.Task[T]") -> None:
        # A task cancelled before its first step never enters _run
        if done.cancelled() and not self._state.is_terminal:
            self._transition(CallState.CANCELLED)

    def cancel(self) -> bool:
        """
        Cancel the in-flight work.

        Only a call in the IN_FLIGHT state can be cancelled; the underlying
        operation is cancelled at most once and no value or error is
        delivered afterwards.

        Returns:
            True if this call requested the cancellation
        """
        if self._state is not CallState.IN_FLIGHT or self._cancel_requested:
            return False

        assert self._task is not None
        self._cancel_requested = True
        logger.debug("%s: cancelling", self.description)
        return self._task.cancel()

    @property
    def cancelled(self) -> bool:
        return self._cancel_requested or self._state is CallState.CANCELLED

    def _require_started(self) -> "asyncio.Task[T]":
        task = self.start()
        if task is None:
            raise RuntimeError(
                f"{self.description} has no work to run; create calls with ServiceCall.prepare()"
            )
        return task

    def subscribe(
        self,
        on_value: Optional[Callable[[T], Any]] = None,
        on_error: Optional[Callable[[ServiceError], Any]] = None,
        on_completed: Optional[Callable[[], Any]] = None,
    ) -> "ServiceCall[T]":
        """
        Start the call and deliver its terminal event to callbacks.

        ``on_value`` followed by ``on_completed`` on success, ``on_error``
        alone on failure, nothing at all after cancellation.
        """
        self._claim()

        if self._state is CallState.FAILED:
            assert self._error is not None
            if on_error is not None:
                on_error(self._error)
            return self

        task = self._require_started()

        def _deliver(done: "asyncio.Task[T]") -> None:
            if self._cancel_requested or done.cancelled():
                return
            error = done.exception()
            if error is not None:
                if on_error is not None:
                    on_error(ErrorClassifier.classify(error))
                return
            if on_value is not None:
                on_value(done.result())
            if on_completed is not None:
                on_completed()

        task.add_done_callback(_deliver)
        return self

    async def _await(self) -> T:
        self._claim()
        if self._state is CallState.FAILED:
            assert self._error is not None
            raise self._error

        return await self._require_started()

    def __await__(self) -> Generator[Any, None, T]:
        return self._await().__await__()

    def __repr__(self) -> str:
        return f"<ServiceCall {self.description} state={self._state.value}>"
