from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional
from core.stats_client import StatsServiceClient
from core.logging_config import LoggerMixin
from core.types import NodeID, UserID
from data.models import Node, UserModel, UserTrafficLog, NodeOnlineLog, TrafficDelta
from data.node_repository import NodeRepository
from data.user_repository import UserRepository
from service.units import byte_size

# Raw bytes a user must move in one cycle to count as online.
ONLINE_THRESHOLD_BYTES = 2048

@dataclass
class TrafficReport:
    online_users: int = 0
    uplink_total: int = 0
    downlink_total: int = 0
    deltas: Dict[UserID, TrafficDelta] = field(default_factory=dict)

def bill(traffic: int, rate: float) -> int:
    return int(rate * traffic)

class TrafficService(LoggerMixin):
    def __init__(self, stats_client: StatsServiceClient, user_repo: UserRepository,
                 node_repo: NodeRepository):
        self.stats_client = stats_client
        self.user_repo = user_repo
        self.node_repo = node_repo

    def collect(self, users: Iterable[UserModel], node: Node,
                report: Optional[TrafficReport] = None) -> TrafficReport:
        """
        Reads and resets every provisioned user's counters.

        Each user with traffic gets its log row written right away. A failing
        stats read propagates, so rows written earlier in the cycle stay while
        the totals update for the cycle never happens.
        """
        report = report if report is not None else TrafficReport()
        for user in users:
            downlink = self.stats_client.get_user_downlink(user.email)
            uplink = self.stats_client.get_user_uplink(user.email)
            if uplink + downlink <= 0:
                continue

            billed_uplink = bill(uplink, node.traffic_rate)
            billed_downlink = bill(downlink, node.traffic_rate)

            if uplink + downlink > ONLINE_THRESHOLD_BYTES:
                report.online_users += 1
            report.uplink_total += uplink
            report.downlink_total += downlink

            self.user_repo.create_traffic_log(UserTrafficLog(
                user_id=user.id,
                node_id=node.id,
                uplink=uplink,
                downlink=downlink,
                rate=node.traffic_rate,
                traffic=byte_size(billed_uplink + billed_downlink)
            ))

            delta = report.deltas.setdefault(user.id, TrafficDelta())
            delta.uplink += billed_uplink
            delta.downlink += billed_downlink
        return report

    def record(self, report: TrafficReport, node_id: NodeID, timestamp: Optional[int] = None) -> None:
        """Writes the online snapshot and advances cumulative totals."""
        if report.online_users > 0:
            self.node_repo.create_online_log(NodeOnlineLog(node_id=node_id, online_user=report.online_users))
        if report.deltas:
            self.user_repo.bulk_advance_totals(report.deltas, timestamp)
            self.logger.debug("Advanced user totals", users=len(report.deltas))
