from .composer import GatewayReply, compose_error, compose_reading, render_number
from .handler import ConnectionStage, GatewayHandler
from .main import create_app

__all__ = [
    "GatewayReply",
    "compose_error",
    "compose_reading",
    "render_number",
    "ConnectionStage",
    "GatewayHandler",
    "create_app",
]
