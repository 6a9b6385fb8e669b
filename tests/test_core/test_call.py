"""
Tests for ServiceCall and TransportExecutor.

Covers the call state machine, single-subscriber delivery and
cancellation of in-flight transport work.
"""

import asyncio

import aiohttp
import pytest

from ksapi.call import CallState, ServiceCall
from ksapi.exceptions import InvalidInputError, RequestError
from ksapi.http.executor import TransportExecutor
from ksapi.models.http import PreparedRequest
from ksapi.models.route import HTTPMethod

URL = "https://api.kickstarter.com/v1/projects/1"


def get_request() -> PreparedRequest:
    return PreparedRequest(method=HTTPMethod.GET, url=URL)


class Recorder:
    """Collects everything a subscription delivers."""

    def __init__(self):
        self.events = []

    def on_value(self, value):
        self.events.append(("value", value))

    def on_error(self, error):
        self.events.append(("error", error))

    def on_completed(self):
        self.events.append(("completed", None))

    def subscribe(self, call):
        return call.subscribe(self.on_value, self.on_error, self.on_completed)


class TestServiceCall:
    """Test the ServiceCall state machine."""

    def test_prepare_builds_eagerly(self):
        """Test that construction runs at once and the work does not."""
        performed = []

        async def perform(value):
            performed.append(value)
            return value

        call = ServiceCall.prepare(lambda: 42, perform)

        assert call.state is CallState.BUILT
        assert performed == []

    def test_construction_failure(self):
        """Test a failing build yields a FAILED call."""

        def build():
            raise InvalidInputError("not serializable")

        async def perform(value):
            raise AssertionError("must not run")

        call = ServiceCall.prepare(build, perform)

        assert call.state is CallState.FAILED
        assert isinstance(call.error, InvalidInputError)
        assert call.start() is None

    @pytest.mark.asyncio
    async def test_await_value(self):
        """Test awaiting a call yields its value."""

        async def perform(value):
            return value * 2

        call = ServiceCall.prepare(lambda: 21, perform)

        assert await call == 42
        assert call.state is CallState.COMPLETED

    @pytest.mark.asyncio
    async def test_await_failed_call_raises(self):
        """Test awaiting a call that failed during construction."""
        call = ServiceCall.failed(InvalidInputError("bad"))

        with pytest.raises(InvalidInputError):
            await call

    @pytest.mark.asyncio
    async def test_raw_failure_is_classified(self):
        """Test that a library exception from the work is classified."""

        async def perform(value):
            raise aiohttp.ClientConnectionError("refused")

        call = ServiceCall.prepare(lambda: None, perform)

        with pytest.raises(RequestError) as exc_info:
            await call

        assert isinstance(exc_info.value.original_error, aiohttp.ClientConnectionError)
        assert call.state is CallState.FAILED
        assert call.error is exc_info.value

    @pytest.mark.asyncio
    async def test_single_subscriber(self):
        """Test that a call can only be consumed once."""

        async def perform(value):
            return value

        call = ServiceCall.prepare(lambda: 1, perform)
        assert await call == 1

        with pytest.raises(RuntimeError):
            await call
        with pytest.raises(RuntimeError):
            call.subscribe()

    @pytest.mark.asyncio
    async def test_start_twice_returns_same_task(self):
        """Test that starting is idempotent."""

        async def perform(value):
            return value

        call = ServiceCall.prepare(lambda: 1, perform)
        task = call.start()

        assert call.start() is task
        assert call.state is CallState.IN_FLIGHT
        assert await task == 1

    def test_subscribe_failed_call_reports_synchronously(self):
        """Test that a FAILED call delivers its error at subscription."""
        recorder = Recorder()
        error = InvalidInputError("bad")

        recorder.subscribe(ServiceCall.failed(error))

        assert recorder.events == [("error", error)]

    def test_cancel_before_start_is_refused(self):
        """Test that only in-flight calls can be cancelled."""

        async def perform(value):
            return value

        call = ServiceCall.prepare(lambda: 1, perform)

        assert call.cancel() is False
        assert call.state is CallState.BUILT
        assert not call.cancelled

    @pytest.mark.asyncio
    async def test_await_call_without_work(self):
        """Test a call not created through prepare() reports a usable error."""
        with pytest.raises(RuntimeError, match="no work to run"):
            await ServiceCall(description="bare")

    @pytest.mark.asyncio
    async def test_subscribe_call_without_work(self):
        with pytest.raises(RuntimeError, match="no work to run"):
            ServiceCall(description="bare").subscribe()

    def test_repr(self):
        call = ServiceCall.failed(InvalidInputError("bad"), description="GET /v1/x")

        assert repr(call) == "<ServiceCall GET /v1/x state=failed>"


class TestTransportExecutor:
    """Test execution of prepared requests."""

    def test_execute_is_cold(self, make_transport, outcome):
        """Test nothing is sent before the call is consumed."""
        transport = make_transport(outcome({"id": 1}))

        call = TransportExecutor(transport).execute(get_request())

        assert call.state is CallState.BUILT
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_execute_success(self, make_transport, outcome):
        """Test a successful exchange yields the raw outcome."""
        expected = outcome({"id": 1})
        transport = make_transport(expected)

        result = await TransportExecutor(transport).execute(get_request())

        assert result is expected
        assert [r.url for r in transport.requests] == [URL]

    @pytest.mark.asyncio
    async def test_execute_transport_failure(self, make_transport):
        """Test transport exceptions terminate the call with RequestError."""
        transport = make_transport(aiohttp.ServerDisconnectedError())

        call = TransportExecutor(transport).execute(get_request())
        with pytest.raises(RequestError) as exc_info:
            await call

        assert exc_info.value.url == URL
        assert call.state is CallState.FAILED

    @pytest.mark.asyncio
    async def test_subscribe_delivers_value_then_completion(self, make_transport, outcome):
        """Test a subscriber sees one value followed by completion."""
        expected = outcome({"id": 1})
        transport = make_transport(expected)
        recorder = Recorder()

        call = recorder.subscribe(TransportExecutor(transport).execute(get_request()))
        await call.start()
        await asyncio.sleep(0)

        assert recorder.events == [("value", expected), ("completed", None)]

    @pytest.mark.asyncio
    async def test_subscribe_delivers_single_error(self, make_transport):
        """Test a subscriber sees exactly one error and no completion."""
        transport = make_transport(aiohttp.ClientConnectionError("refused"))
        recorder = Recorder()

        call = recorder.subscribe(TransportExecutor(transport).execute(get_request()))
        with pytest.raises(RequestError):
            await call.start()
        await asyncio.sleep(0)

        assert len(recorder.events) == 1
        kind, error = recorder.events[0]
        assert kind == "error"
        assert isinstance(error, RequestError)

    @pytest.mark.asyncio
    async def test_cancel_in_flight(self, make_transport):
        """Test cancelling a pending call cancels the transport once and delivers nothing."""
        transport = make_transport(block=True)
        recorder = Recorder()

        call = recorder.subscribe(TransportExecutor(transport).execute(get_request()))
        await transport.started.wait()
        assert call.state is CallState.IN_FLIGHT

        assert call.cancel() is True
        assert call.cancel() is False

        with pytest.raises(asyncio.CancelledError):
            await call.start()
        await asyncio.sleep(0)

        assert transport.cancellations == 1
        assert recorder.events == []
        assert call.state is CallState.CANCELLED
        assert call.cancelled

    @pytest.mark.asyncio
    async def test_cancel_before_first_step(self, make_transport):
        """Test cancelling right after start settles the call without touching the transport."""
        transport = make_transport(block=True)
        call = TransportExecutor(transport).execute(get_request())

        task = call.start()
        assert call.cancel() is True

        with pytest.raises(asyncio.CancelledError):
            await task

        assert call.state is CallState.CANCELLED
        assert call.cancel() is False
        assert call.start() is task
        assert transport.requests == []
        assert transport.cancellations == 0

    @pytest.mark.asyncio
    async def test_subscribe_then_cancel_immediately(self, make_transport):
        transport = make_transport(block=True)
        recorder = Recorder()

        call = recorder.subscribe(TransportExecutor(transport).execute(get_request()))
        assert call.cancel() is True
        await asyncio.sleep(0.01)

        assert call.state is CallState.CANCELLED
        assert recorder.events == []
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_cancel_after_completion_is_refused(self, make_transport, outcome):
        """Test a finished call cannot be cancelled."""
        transport = make_transport(outcome({}))
        call = TransportExecutor(transport).execute(get_request())

        await call

        assert call.cancel() is False
        assert call.state is CallState.COMPLETED
