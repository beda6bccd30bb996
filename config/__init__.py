# Configuration module exports
from .app_config import (
    AppConfig,
    DatabaseConfig,
    NodeConfig,
    XrayConfig,
    LoggingConfig
)

__all__ = [
    'AppConfig',
    'DatabaseConfig',
    'NodeConfig',
    'XrayConfig',
    'LoggingConfig'
]
