"""
Tasmota Tiny-Monitor - JSON gateway for a Tasmota power-meter status page.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .config import Config, load_config
from .extractor import MeterReading, extract, normalize
from .server import run_server
from .web import GatewayHandler, create_app

__all__ = [
    "__version__",
    "Config",
    "load_config",
    "MeterReading",
    "extract",
    "normalize",
    "run_server",
    "GatewayHandler",
    "create_app",
]
