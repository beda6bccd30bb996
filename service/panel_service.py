"""
Cycle controller for a managed node.
One cycle: connectivity check, heartbeat, traffic accounting, user sync.
"""
import time
from dataclasses import dataclass
from typing import Callable, Optional
from core.exceptions import DatabaseError
from core.logging_config import LoggerMixin, log_performance
from core.system_stats import get_system_load
from data.db import Database
from data.models import Node, NodeInfo
from data.node_repository import NodeRepository
from service.sync_service import ProvisionedUsers, SyncResult, UserSyncService
from service.traffic_service import TrafficReport, TrafficService
from service.units import byte_size

@dataclass
class CycleResult:
    added: int
    deleted: int
    online_users: int
    uplink_total: int
    downlink_total: int

class PanelService(LoggerMixin):
    """
    Runs cycles for one node against one database.

    Holds the only mutable state of the process: the provisioned user set
    and the consecutive lost-connection counter.
    """

    def __init__(self, db: Database, node: Node, node_repo: NodeRepository,
                 traffic_service: TrafficService, sync_service: UserSyncService,
                 clock: Callable[[], float] = time.monotonic,
                 load_reader: Callable[[], str] = get_system_load):
        self.db = db
        self.node = node
        self.node_repo = node_repo
        self.traffic_service = traffic_service
        self.sync_service = sync_service
        self.clock = clock
        self.load_reader = load_reader
        self.provisioned = ProvisionedUsers()
        self.retry_times = 0
        self.start_at = clock()

    @classmethod
    def create(cls, db: Database, node_id: int, node_repo: NodeRepository,
               traffic_service: TrafficService, sync_service: UserSyncService) -> 'PanelService':
        """Loads the node once; its rate stays fixed for the process lifetime."""
        node = node_repo.get_node(node_id)
        service = cls(db, node, node_repo, traffic_service, sync_service)
        service.logger.debug("Node loaded", node_id=node.id, traffic_rate=f"{node.traffic_rate:.2f}")
        return service

    @property
    def uptime(self) -> int:
        return int(self.clock() - self.start_at)

    @log_performance
    def run_cycle(self) -> Optional[CycleResult]:
        """
        Runs one cycle. Returns None when the database is unreachable.

        Any other failure propagates to the caller with the cycle aborted at
        that point.
        """
        try:
            self.db.ping()
        except DatabaseError as e:
            self.retry_times += 1
            self.logger.debug("Lost db connection", retry_times=self.retry_times, error=str(e))
            return None
        self.retry_times = 0

        report = TrafficReport()
        sync = SyncResult()
        try:
            self.node_repo.create_node_info(NodeInfo(
                node_id=self.node.id,
                uptime=self.uptime,
                load=self.load_reader()
            ))
            self.traffic_service.collect(self.provisioned, self.node, report)
            self.traffic_service.record(report, self.node.id)
            self.sync_service.sync(self.node.id, self.provisioned, sync)
        finally:
            self.logger.debug(
                f"+ {sync.added} users, - {sync.deleted} users, "
                f"↓ {byte_size(report.downlink_total)}, ↑ {byte_size(report.uplink_total)}, "
                f"online {report.online_users}"
            )

        return CycleResult(
            added=sync.added,
            deleted=sync.deleted,
            online_users=report.online_users,
            uplink_total=report.uplink_total,
            downlink_total=report.downlink_total
        )
