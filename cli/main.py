#!/usr/bin/env python3
"""
Node sync agent entry point.
Keeps the Xray inbound's users in line with the panel database and
accounts per-user traffic every CHECK_RATE seconds.
"""
import argparse
import sys
from typing import List, Optional

from config.app_config import AppConfig
from core.account import resolve_protocol
from core.handler_client import HandlerServiceClient
from core.stats_client import StatsServiceClient
from core.xray_api import XrayAPI
from core.logging_config import setup_structured_logging, get_logger
from core.exceptions import (
    ConfigurationError,
    DatabaseError,
    NodeNotFoundError,
    FatalSyncError
)
from data.db import Database
from data.node_repository import NodeRepository
from data.user_repository import UserRepository
from service.panel_service import PanelService
from service.scheduler import Scheduler
from service.sync_service import UserSyncService
from service.traffic_service import TrafficService

DEFAULT_ENV_FILE = "/etc/node-sync/.env"

logger = get_logger(__name__)

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="node-sync", description="Xray node user and traffic sync")
    parser.add_argument("--env-file", default=DEFAULT_ENV_FILE, help="dotenv file to preload")
    parser.add_argument("--log-level", default=None, help="override LOG_LEVEL")
    return parser.parse_args(argv)

def build_panel(config: AppConfig) -> PanelService:
    """Wires the database, the Xray clients and the services for one node."""
    db = Database(config.database.path, pool_size=config.database.pool_size,
                  timeout=config.database.timeout)
    db.apply_schema()

    protocol = resolve_protocol(config.xray)
    logger.info("Resolved inbound protocol", inbound_tag=config.xray.inbound_tag, protocol=protocol.value)

    api = XrayAPI(config.xray.binary, config.xray.api_address, timeout=config.xray.api_timeout)
    node_repo = NodeRepository(db)
    user_repo = UserRepository(db)

    traffic_service = TrafficService(StatsServiceClient(api), user_repo, node_repo)
    sync_service = UserSyncService(
        user_repo,
        HandlerServiceClient(api, config.xray.inbound_tag, protocol),
        protocol,
        config.xray,
        ignore_empty_vmess_id=config.node.ignore_empty_vmess_id
    )
    return PanelService.create(db, config.node.node_id, node_repo, traffic_service, sync_service)

def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        config = AppConfig.from_env(args.env_file)
        if args.log_level:
            config.logging.log_level = args.log_level
        config.validate()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    setup_structured_logging(config.logging.log_level, json_output=config.logging.json)

    try:
        panel = build_panel(config)
    except (ConfigurationError, NodeNotFoundError, DatabaseError) as e:
        logger.critical("Startup failed", error=str(e), error_type=type(e).__name__)
        return 1

    scheduler = Scheduler(panel.run_cycle, config.node.check_rate)
    try:
        scheduler.run_forever()
    except FatalSyncError as e:
        logger.critical("Fatal sync error, stopping", error=str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user")
    return 0

if __name__ == "__main__":
    sys.exit(main())
