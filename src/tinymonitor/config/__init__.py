from .config import (
    Config,
    ExtractionConfig,
    MonitoringConfig,
    ServerConfig,
    UpstreamConfig,
    find_config_file,
    load_config,
)

__all__ = [
    "Config",
    "ExtractionConfig",
    "MonitoringConfig",
    "ServerConfig",
    "UpstreamConfig",
    "find_config_file",
    "load_config",
]
