# Core module exports
from .types import *
from .exceptions import *

__all__ = [
    'ProxyProtocol',
    'NodeSyncError',
    'ConfigurationError',
    'DatabaseError',
    'NodeNotFoundError',
    'XrayAPIError',
    'FatalSyncError'
]
