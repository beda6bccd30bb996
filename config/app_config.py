"""
Centralized application configuration management.
Provides type-safe configuration with environment variable support.
"""

import os
from dataclasses import dataclass, field
from typing import Optional
from pathlib import Path
from dotenv import load_dotenv

from core.exceptions import ConfigurationError
from core.types import ProxyProtocol

def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")

def _env_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be an integer, got '{raw}'")

@dataclass
class DatabaseConfig:
    """Database configuration settings."""
    path: str = "/var/lib/node-sync/panel.db"
    pool_size: int = 5
    timeout: int = 30

@dataclass
class NodeConfig:
    """Identity of the managed node and polling behaviour."""
    node_id: int = 0
    check_rate: int = 60
    ignore_empty_vmess_id: bool = False

@dataclass
class XrayConfig:
    """Xray API endpoint and account settings for the managed inbound."""
    binary: str = "/usr/local/bin/xray"
    api_address: str = "127.0.0.1:10085"
    api_timeout: int = 10
    config_file: Optional[str] = None
    inbound_tag: str = "proxy"
    protocol: Optional[str] = None
    level: int = 0
    alter_id: int = 0
    security: str = "auto"

@dataclass
class LoggingConfig:
    """Logging configuration settings."""
    log_level: str = "INFO"
    json: bool = True

@dataclass
class AppConfig:
    """Main application configuration."""
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    node: NodeConfig = field(default_factory=NodeConfig)
    xray: XrayConfig = field(default_factory=XrayConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> 'AppConfig':
        """Load configuration from environment variables."""
        if env_file and os.path.exists(env_file):
            load_dotenv(env_file)

        return cls(
            database=DatabaseConfig(
                path=os.getenv("DATABASE_PATH", "/var/lib/node-sync/panel.db"),
                pool_size=_env_int("DB_POOL_SIZE", "5"),
                timeout=_env_int("DB_TIMEOUT", "30")
            ),
            node=NodeConfig(
                node_id=_env_int("NODE_ID", "0"),
                check_rate=_env_int("CHECK_RATE", "60"),
                ignore_empty_vmess_id=_env_bool("IGNORE_EMPTY_VMESS_ID")
            ),
            xray=XrayConfig(
                binary=os.getenv("XRAY_BINARY", "/usr/local/bin/xray"),
                api_address=os.getenv("XRAY_API_ADDRESS", "127.0.0.1:10085"),
                api_timeout=_env_int("XRAY_API_TIMEOUT", "10"),
                config_file=os.getenv("XRAY_CONFIG_FILE") or None,
                inbound_tag=os.getenv("XRAY_INBOUND_TAG", "proxy"),
                protocol=os.getenv("XRAY_PROTOCOL") or None,
                level=_env_int("XRAY_USER_LEVEL", "0"),
                alter_id=_env_int("XRAY_ALTER_ID", "0"),
                security=os.getenv("XRAY_SECURITY", "auto")
            ),
            logging=LoggingConfig(
                log_level=os.getenv("LOG_LEVEL", "INFO"),
                json=_env_bool("LOG_JSON", "true")
            )
        )

    def validate(self) -> None:
        """Validate configuration settings."""
        if self.node.node_id <= 0:
            raise ConfigurationError("NODE_ID must be a positive integer")
        if self.node.check_rate <= 0:
            raise ConfigurationError("CHECK_RATE must be a positive number of seconds")
        if not self.xray.inbound_tag:
            raise ConfigurationError("XRAY_INBOUND_TAG is required")
        if self.xray.protocol:
            known = {p.value for p in ProxyProtocol}
            if self.xray.protocol.strip().lower() not in known:
                raise ConfigurationError(
                    f"XRAY_PROTOCOL must be one of {sorted(known)}, got '{self.xray.protocol}'"
                )

        # Ensure database directory exists
        db_path = Path(self.database.path)
        db_path.parent.mkdir(parents=True, exist_ok=True)
