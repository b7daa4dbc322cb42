import importlib.util
from pathlib import Path

VERSION = "1.2.0"

# watched files inside the certificate directory
CERT_FILE_NAME = "fullchain.pem"
KEY_FILE_NAME = "privkey.pem"

# polling
DEFAULT_INTERVAL_SEC = 3600.0

# files paths
ETC_DIR = Path("/etc/certwatch")
CONFIG_FILE = ETC_DIR / "config.yaml"

# example HTTPS server
DEFAULT_LISTEN_ADDRESS = "0.0.0.0"
DEFAULT_LISTEN_PORT = 8443

WATCHDOG_LIB = False
if importlib.util.find_spec("watchdog"):
    WATCHDOG_LIB = True

PROMETHEUS_LIB = False
if importlib.util.find_spec("prometheus_client"):
    PROMETHEUS_LIB = True
