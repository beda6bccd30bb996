"""
Type definitions for the node sync agent.
Provides type safety and better IDE support.
"""

from typing import Dict, List, Any
from enum import Enum

UserID = int
NodeID = int
Email = str

class ProxyProtocol(Enum):
    """Account families supported by the managed inbound."""
    VMESS = "vmess"
    VLESS = "vless"
    TROJAN = "trojan"

    @classmethod
    def parse(cls, value: str) -> "ProxyProtocol":
        """Map an inbound protocol name to a family, vmess when unknown."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.VMESS


DatabaseRow = Dict[str, Any]
DatabaseResult = List[DatabaseRow]
