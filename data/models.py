from dataclasses import dataclass
from core.types import UserID, NodeID, Email

@dataclass
class Node:
    id: NodeID
    name: str
    traffic_rate: float

@dataclass(frozen=True)
class UserModel:
    """A user as provisioned on the inbound. Equality covers every field."""
    id: UserID
    email: Email
    vmess_id: str
    port: int

@dataclass
class UserTrafficLog:
    user_id: UserID
    node_id: NodeID
    uplink: int
    downlink: int
    rate: float
    traffic: str

@dataclass
class NodeInfo:
    node_id: NodeID
    uptime: int
    load: str

@dataclass
class NodeOnlineLog:
    node_id: NodeID
    online_user: int

@dataclass
class TrafficDelta:
    uplink: int = 0
    downlink: int = 0
