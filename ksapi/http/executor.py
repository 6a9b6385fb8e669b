"""
Transport execution.

TransportExecutor runs a PreparedRequest on the client's single transport
and guarantees one classified terminal outcome per execution.
"""

from __future__ import annotations

import asyncio
import logging

from ..call import ServiceCall
from ..exceptions import ErrorClassifier
from ..models.http import PreparedRequest, TransportOutcome
from .transport import Transport

logger = logging.getLogger(__name__)


class TransportExecutor:
    """Executes prepared requests; never retries."""

    def __init__(self, transport: Transport) -> None:
        self.transport = transport

    def execute(self, request: PreparedRequest) -> ServiceCall[TransportOutcome]:
        """
        Wrap one network exchange in a cold, cancellable call.

        Nothing is sent until the returned call is awaited, started or
        subscribed. Transport failures terminate the call with RequestError.
        """
        return ServiceCall.prepare(
            lambda: request, self._send, description=request.describe()
        )

    async def _send(self, request: PreparedRequest) -> TransportOutcome:
        try:
            return await self.transport.send(request)
        except asyncio.CancelledError:
            logger.debug("Cancelled %s", request.describe())
            raise
        except Exception as e:
            error = ErrorClassifier.classify_transport_error(e, request.url)
            logger.debug("Transport failure for %s: %s", request.describe(), error.message)
            raise error from e
