import time
from typing import Dict, List, Optional
from .db import Database
from .models import UserModel, UserTrafficLog, TrafficDelta
from core.types import NodeID, UserID

class UserRepository:
    def __init__(self, db: Database) -> None:
        self.db = db

    def get_all_users(self, node_id: NodeID) -> List[UserModel]:
        """Enabled users with quota left that share a label with the node."""
        query = """
        SELECT DISTINCT u.id, u.username, u.vmess_id, u.port
        FROM user u
        JOIN user_label ul ON ul.user_id = u.id
        JOIN ss_node_label nl ON nl.label_id = ul.label_id
        WHERE nl.node_id = ?
          AND u.enable = 1
          AND u.u + u.d < u.transfer_enable
        ORDER BY u.id
        """
        rows = self.db.execute_query(query, (node_id,))
        return [
            UserModel(id=row['id'], email=row['username'], vmess_id=row['vmess_id'] or "", port=row['port'])
            for row in rows
        ]

    def create_traffic_log(self, log: UserTrafficLog) -> None:
        query = """
        INSERT INTO user_traffic_log (user_id, u, d, node_id, rate, traffic)
        VALUES (?, ?, ?, ?, ?, ?)
        """
        self.db.execute_query(
            query, (log.user_id, log.uplink, log.downlink, log.node_id, log.rate, log.traffic)
        )

    def bulk_advance_totals(self, deltas: Dict[UserID, TrafficDelta], timestamp: Optional[int] = None) -> None:
        """
        Adds every user's billed delta to its running totals in one statement.

        Each user id gets its own CASE branch, so the write cost stays a single
        UPDATE no matter how many users moved traffic. Ids and deltas are
        coerced to int and inlined; only the timestamp is bound.
        """
        if not deltas:
            return
        if timestamp is None:
            timestamp = int(time.time())

        rows = [(int(user_id), int(delta.uplink), int(delta.downlink)) for user_id, delta in deltas.items()]
        u_cases = " ".join(f"WHEN {user_id} THEN u + {uplink}" for user_id, uplink, _ in rows)
        d_cases = " ".join(f"WHEN {user_id} THEN d + {downlink}" for user_id, _, downlink in rows)
        id_list = ", ".join(str(user_id) for user_id, _, _ in rows)
        query = (
            f"UPDATE user SET u = CASE id {u_cases} END, "
            f"d = CASE id {d_cases} END, t = ? "
            f"WHERE id IN ({id_list})"
        )
        self.db.execute_query(query, (timestamp,))
