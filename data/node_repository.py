from .db import Database
from .models import Node, NodeInfo, NodeOnlineLog
from core.types import NodeID
from core.exceptions import NodeNotFoundError

class NodeRepository:
    def __init__(self, db: Database) -> None:
        self.db = db

    def get_node(self, node_id: NodeID) -> Node:
        """Loads the node row; raises NodeNotFoundError when missing."""
        query = "SELECT id, name, traffic_rate FROM ss_node WHERE id = ?"
        result = self.db.execute_query(query, (node_id,))
        if not result:
            raise NodeNotFoundError(node_id)
        row = result[0]
        return Node(id=row['id'], name=row['name'], traffic_rate=float(row['traffic_rate']))

    def create_node_info(self, info: NodeInfo) -> None:
        query = "INSERT INTO ss_node_info (node_id, uptime, load) VALUES (?, ?, ?)"
        self.db.execute_query(query, (info.node_id, info.uptime, info.load))

    def create_online_log(self, online: NodeOnlineLog) -> None:
        query = "INSERT INTO ss_node_online_log (node_id, online_user) VALUES (?, ?)"
        self.db.execute_query(query, (online.node_id, online.online_user))
