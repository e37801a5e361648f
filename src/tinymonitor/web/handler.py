"""
Per-request orchestration: method check, fetch, extract, normalize, compose.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Optional, Protocol

import structlog

from tinymonitor.config.config import Config
from tinymonitor.errors import GatewayError, MethodError, ParseFailure
from tinymonitor.extractor.extractor import LabelAnchoredExtractor
from tinymonitor.extractor.normalizer import normalize
from tinymonitor.observability import increment
from tinymonitor.observability.metrics import METRICS
from tinymonitor.upstream.fetcher import UpstreamFetcher

from .composer import GatewayReply, compose_error, compose_reading

logger = structlog.get_logger(__name__)


class Fetcher(Protocol):
    url: str

    async def fetch(self) -> bytes: ...


class ConnectionStage(Enum):
    AWAIT_REQUEST = "await_request"
    VALIDATED = "validated"
    FETCHING = "fetching"
    EXTRACTING = "extracting"
    NORMALIZING = "normalizing"
    COMPOSING = "composing"
    RESPONDING = "responding"
    CLOSED = "closed"


class GatewayHandler:
    """Runs one request through the pipeline and returns exactly one reply.

    The first failing stage short-circuits to ``COMPOSING`` with its error;
    nothing is retried and no partial reading is ever sent. A semaphore
    bounds how many requests run the pipeline at once (one by default).
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        fetcher: Optional[Fetcher] = None,
        extractor: Optional[LabelAnchoredExtractor] = None,
    ):
        self.config = config or Config()
        self.fetcher: Fetcher = fetcher or UpstreamFetcher(self.config.upstream)
        self.extractor = extractor or LabelAnchoredExtractor(self.config.extraction)
        self._slots = asyncio.Semaphore(self.config.server.max_concurrent_requests)

    def _enter(self, stage: ConnectionStage) -> ConnectionStage:
        logger.debug("Connection stage", stage=stage.value)
        return stage

    async def handle(self, method: str) -> GatewayReply:
        stage = self._enter(ConnectionStage.AWAIT_REQUEST)
        async with self._slots:
            METRICS["requests_in_flight"].inc()
            try:
                reply = await self._run(method, stage)
            finally:
                METRICS["requests_in_flight"].dec()
        self._enter(ConnectionStage.RESPONDING)
        return reply

    def closed(self) -> None:
        """Called once the reply has been written and the connection released."""
        self._enter(ConnectionStage.CLOSED)

    async def _run(self, method: str, stage: ConnectionStage) -> GatewayReply:
        try:
            if method != "GET":
                raise MethodError(f"method {method} not allowed")
            stage = self._enter(ConnectionStage.VALIDATED)

            stage = self._enter(ConnectionStage.FETCHING)
            body = await self.fetcher.fetch()

            stage = self._enter(ConnectionStage.EXTRACTING)
            fields = self.extractor.extract(body)

            stage = self._enter(ConnectionStage.NORMALIZING)
            reading = normalize(fields, unknown_state=self.config.extraction.unknown_state)

            stage = self._enter(ConnectionStage.COMPOSING)
            reply = compose_reading(
                reading,
                name=self.config.server.device_name,
                source=self.fetcher.url,
                max_body_bytes=self.config.server.max_body_bytes,
            )
        except GatewayError as e:
            self._enter(ConnectionStage.COMPOSING)
            if isinstance(e, ParseFailure):
                increment("parse_failures_total", labels={"stage": stage.value})
            logger.warning(
                "Request failed",
                method=method,
                stage=stage.value,
                error_type=type(e).__name__,
                error=str(e),
                status=e.status_code,
                context=e.context,
            )
            increment("requests_total", labels={"outcome": type(e).__name__})
            return compose_error(e)
        except Exception:
            self._enter(ConnectionStage.COMPOSING)
            logger.error("Unexpected error while handling request", method=method, stage=stage.value, exc_info=True)
            increment("requests_total", labels={"outcome": "internal"})
            return compose_error(GatewayError())

        logger.info("Reading served", state=reading.state, voltage=reading.voltage)
        increment("requests_total", labels={"outcome": "ok"})
        return reply
