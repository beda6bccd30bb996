import logging
import psutil
logger = logging.getLogger(__name__)
DEFAULT_LOAD = "0.00 0.00 0.00"
def get_system_load() -> str:
    """1, 5 and 15 minute load averages as a space separated string."""
    try:
        load1, load5, load15 = psutil.getloadavg()
    except (OSError, AttributeError) as e:
        logger.debug(f"Load average unavailable: {e}")
        return DEFAULT_LOAD
    return f"{load1:.2f} {load5:.2f} {load15:.2f}"
