import os
import re
import json
import tempfile
from typing import Dict, Any

from core.xray_api import XrayAPI
from core.types import Email, ProxyProtocol
from core.exceptions import XrayAPIError
from core.logging_config import get_logger

logger = get_logger(__name__)

ADDED_PATTERN = re.compile(r"Added\s+(\d+)\s+user")

class HandlerServiceClient:
    """Adds and removes users on a single inbound of the running engine."""

    def __init__(self, api: XrayAPI, inbound_tag: str, protocol: ProxyProtocol = ProxyProtocol.VMESS):
        self.api = api
        self.inbound_tag = inbound_tag
        self.protocol = protocol

    def add_user(self, account: Dict[str, Any]) -> None:
        fragment = {
            "inbounds": [{
                "tag": self.inbound_tag,
                "protocol": self.protocol.value,
                "settings": {"clients": [account]}
            }]
        }
        try:
            fd, path = tempfile.mkstemp(prefix="node-sync-", suffix=".json")
        except OSError as e:
            raise XrayAPIError("adu", f"cannot create inbound fragment: {e}")
        try:
            try:
                with os.fdopen(fd, "w") as f:
                    json.dump(fragment, f)
            except (OSError, TypeError, ValueError) as e:
                raise XrayAPIError("adu", f"cannot write inbound fragment: {e}")
            output = self.api.call("adu", [path])
        finally:
            os.unlink(path)

        logger.debug("adu finished", email=account.get("email"), output=(output or "").strip())
        match = ADDED_PATTERN.search(output or "")
        if match and int(match.group(1)) == 0:
            raise XrayAPIError("adu", f"user {account.get('email')} was not added: {output.strip()}")

    def remove_user(self, email: Email) -> None:
        self.api.call("rmu", [f"-tag={self.inbound_tag}", email])
