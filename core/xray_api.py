"""
Thin runner around the `xray api` command line client.
Every call is a blocking round trip bounded by the transport timeout.
"""
import subprocess
from typing import List, Optional

from core.exceptions import XrayAPIError
from core.logging_config import get_logger

logger = get_logger(__name__)

class XrayAPI:
    def __init__(self, binary: str, server: str, timeout: Optional[float] = 10):
        self.binary = binary
        self.server = server
        self.timeout = timeout

    def call(self, command: str, args: List[str]) -> str:
        cmd = [self.binary, "api", command, f"--server={self.server}", *args]
        logger.debug("Running xray api", command=" ".join(cmd))
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout)
        except FileNotFoundError:
            raise XrayAPIError(command, f"binary not found: {self.binary}")
        except subprocess.TimeoutExpired:
            raise XrayAPIError(command, f"timed out after {self.timeout}s")
        except OSError as e:
            raise XrayAPIError(command, str(e))

        if result.returncode != 0:
            reason = (result.stderr or result.stdout or "").strip()
            raise XrayAPIError(command, reason or f"exit status {result.returncode}")
        return result.stdout
