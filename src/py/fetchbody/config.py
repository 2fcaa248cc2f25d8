from os import getenv
from .utils.io import DEFAULT_ENCODING  # NOQA: F401

# Default byte budget for bodies, 0 means unlimited
MAX_SIZE: int = int(getenv("FETCHBODY_MAX_SIZE", 0))

# Default wall-clock budget (in seconds) for consuming a body, 0 means none
TIMEOUT: float = float(getenv("FETCHBODY_TIMEOUT", 0))

# How many bytes of a body are inspected when sniffing its charset
SNIFF_SIZE: int = int(getenv("FETCHBODY_SNIFF_SIZE", 1024))

LOG_LEVEL: str = getenv("FETCHBODY_LOG_LEVEL", "Warning")

# EOF
