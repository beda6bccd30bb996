import json

from core.xray_api import XrayAPI
from core.types import Email
from core.exceptions import XrayAPIError
from core.logging_config import get_logger

logger = get_logger(__name__)

class StatsServiceClient:
    """Reads per-user traffic counters, resetting them on every read."""

    def __init__(self, api: XrayAPI):
        self.api = api

    def get_user_uplink(self, email: Email) -> int:
        return self._get_user_stats(f"user>>>{email}>>>traffic>>>uplink")

    def get_user_downlink(self, email: Email) -> int:
        return self._get_user_stats(f"user>>>{email}>>>traffic>>>downlink")

    def _get_user_stats(self, name: str, reset: bool = True) -> int:
        args = ["-name", name]
        if reset:
            args.append("-reset")
        try:
            output = self.api.call("stats", args)
        except XrayAPIError as e:
            # Counters only exist once the user has moved traffic.
            if f"{name} not found" in e.reason:
                logger.debug("Counter not created yet, reading as zero", name=name)
                return 0
            raise

        try:
            data = json.loads(output) if output.strip() else {}
            value = (data.get("stat") or {}).get("value", 0)
            return int(value or 0)
        except (ValueError, TypeError, AttributeError) as e:
            raise XrayAPIError("stats", f"unexpected response for {name}: {e}")
