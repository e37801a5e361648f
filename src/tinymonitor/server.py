"""
Process lifecycle: bind, serve, drain on SIGINT/SIGTERM, stop.
"""

from __future__ import annotations

import signal
import socket
from typing import Any, List, Optional

import structlog
import uvicorn
from fastapi import FastAPI

from tinymonitor.config.config import Config
from tinymonitor.web.main import create_app

logger = structlog.get_logger(__name__)


class ShutdownSignals:
    """Records SIGINT/SIGTERM instead of letting them kill the process.

    uvicorn installs its own handlers while serving and, on exit, restores the
    previous ones and re-raises the signal it caught. With these installed the
    re-raised signal lands here, so a signal-initiated stop still exits 0.
    """

    def __init__(self) -> None:
        self.received: List[int] = []
        self._shutdown_signals = (signal.SIGINT, signal.SIGTERM)
        self._previous: dict[int, Any] = {}

    def _signal_handler(self, signum: int, frame: Any) -> None:
        self.received.append(signum)

    def install(self) -> None:
        for sig in self._shutdown_signals:
            self._previous[sig] = signal.signal(sig, self._signal_handler)

    def restore(self) -> None:
        for sig, handler in self._previous.items():
            signal.signal(sig, handler)
        self._previous.clear()


def bind_socket(host: str, port: int, backlog: int = 16) -> socket.socket:
    """Create the listening socket; raises ``OSError`` if the port is taken."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        sock.listen(backlog)
    except OSError:
        sock.close()
        raise
    return sock


def run_server(config: Config, app: Optional[FastAPI] = None) -> int:
    """Serve until interrupted.

    Returns:
        0 after a clean shutdown, 1 if the socket could not be bound or the
        application failed to start.
    """
    server_config = config.server
    try:
        app = app or create_app(config)
        sock = bind_socket(server_config.host, server_config.port, server_config.backlog)
    except OSError as e:
        logger.error("Failed to bind listening socket", host=server_config.host, port=server_config.port, error=str(e))
        return 1

    uv_config = uvicorn.Config(
        app,
        log_config=None,
        access_log=False,
        lifespan="on",
        backlog=server_config.backlog,
        timeout_keep_alive=1,
    )
    server = uvicorn.Server(uv_config)
    signals = ShutdownSignals()
    signals.install()

    host, port = sock.getsockname()[:2]
    logger.info("Server running", host=host, port=port)
    try:
        server.run(sockets=[sock])
    finally:
        signals.restore()
        sock.close()

    if signals.received:
        logger.info("Shutdown signal handled", signals=[signal.Signals(s).name for s in signals.received])

    if not server.started:
        logger.error("Server failed to start", host=host, port=port)
        return 1

    logger.info("Server stopped")
    return 0
