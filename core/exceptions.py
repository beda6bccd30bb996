"""
Custom exception classes for the node sync agent.
Provides specific error handling and better debugging.
"""

class NodeSyncError(Exception):
    """Base exception for node sync operations."""
    pass

class ConfigurationError(NodeSyncError):
    """Raised when configuration is invalid or missing."""
    pass

class DatabaseError(NodeSyncError):
    """Raised when database operations fail."""
    pass

class NodeNotFoundError(NodeSyncError):
    """Raised when the configured node does not exist in the database."""

    def __init__(self, node_id: int):
        self.node_id = node_id
        super().__init__(f"Node '{node_id}' not found")

class XrayAPIError(NodeSyncError):
    """Raised when a call against the Xray API fails."""

    def __init__(self, command: str, reason: str):
        self.command = command
        self.reason = reason
        super().__init__(f"Xray API '{command}' failed: {reason}")

class FatalSyncError(NodeSyncError):
    """
    Raised for unrecoverable misconfiguration found during a cycle.
    The run loop stops the process instead of retrying on the next tick.
    """

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)
