# Data module exports
from .models import Node, UserModel, UserTrafficLog, NodeInfo, NodeOnlineLog, TrafficDelta
from .db import Database
from .node_repository import NodeRepository
from .user_repository import UserRepository

__all__ = [
    'Node',
    'UserModel',
    'UserTrafficLog',
    'NodeInfo',
    'NodeOnlineLog',
    'TrafficDelta',
    'Database',
    'NodeRepository',
    'UserRepository'
]
