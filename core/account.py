"""
Account payloads for the managed inbound.
The protocol family is resolved once at startup from the Xray config.
"""
import json
import logging
from typing import Dict, Any
from config.app_config import XrayConfig
from core.exceptions import ConfigurationError
from core.types import ProxyProtocol
from data.models import UserModel
logger = logging.getLogger(__name__)
def build_account(user: UserModel, protocol: ProxyProtocol, level: int = 0,
                  alter_id: int = 0, security: str = "auto") -> Dict[str, Any]:
    account: Dict[str, Any] = {"email": user.email, "level": level}
    if protocol is ProxyProtocol.VLESS:
        account["id"] = user.vmess_id
    elif protocol is ProxyProtocol.TROJAN:
        account["password"] = user.vmess_id
    else:
        account["id"] = user.vmess_id
        account["alterId"] = alter_id
        account["security"] = security
    return account
def resolve_protocol(xray_config: XrayConfig) -> ProxyProtocol:
    if xray_config.protocol:
        return ProxyProtocol.parse(xray_config.protocol)
    if not xray_config.config_file:
        logger.info(f"No Xray config file set, assuming {ProxyProtocol.VMESS.value}")
        return ProxyProtocol.VMESS
    try:
        with open(xray_config.config_file, "r") as f:
            engine_config = json.load(f)
    except (IOError, ValueError) as e:
        raise ConfigurationError(f"Cannot read Xray config {xray_config.config_file}: {e}")
    for inbound in engine_config.get("inbounds") or []:
        if isinstance(inbound, dict) and inbound.get("tag") == xray_config.inbound_tag:
            return ProxyProtocol.parse(inbound.get("protocol", ""))
    raise ConfigurationError(
        f"Inbound '{xray_config.inbound_tag}' not found in {xray_config.config_file}"
    )
