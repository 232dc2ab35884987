import datetime
import logging
import os
import sys
from urllib.parse import urlparse
from zoneinfo import ZoneInfo
from dotenv import load_dotenv

from database.config_store import DEFAULT_TEMP_THRESHOLD

load_dotenv()

# Setup logging untuk seluruh aplikasi
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)

MQTT_TLS_SCHEMES = ("mqtts", "ssl", "wss")


def parse_broker_address(server, default_port=1883):
    """Split MQTT_SERVER (url or bare host) into (host, port, use_tls)"""
    if not server:
        return None, default_port, False

    if "://" not in server:
        host, _, port = server.partition(":")
        return host, int(port) if port else default_port, False

    parsed = urlparse(server)
    use_tls = parsed.scheme in MQTT_TLS_SCHEMES
    port = parsed.port or (8883 if use_tls and default_port == 1883 else default_port)
    return parsed.hostname, port, use_tls


def parse_admin_ids(raw):
    """Parse comma-separated Telegram user ids"""
    ids = set()
    for part in (raw or "").split(","):
        part = part.strip()
        if not part:
            continue
        try:
            ids.add(int(part))
        except ValueError:
            logger.warning(f"Ignoring invalid admin user id: {part}")
    return ids


class BridgeConfig:
    """Class untuk mengelola konfigurasi aplikasi"""

    def __init__(self):
        # MQTT Configuration
        self.MQTT_SERVER = os.getenv("MQTT_SERVER")
        self.MQTT_BROKER, self.MQTT_PORT, self.MQTT_TLS = parse_broker_address(
            self.MQTT_SERVER, int(os.getenv("MQTT_PORT", "1883"))
        )
        self.MQTT_USER = os.getenv("MQTT_USER")
        self.MQTT_PASS = os.getenv("MQTT_PASS")
        self.MQTT_TOPICS = {
            "temperature": os.getenv("MQTT_TOPIC_TEMP", "aiot/namuen/temp"),
            "humidity": os.getenv("MQTT_TOPIC_HUM", "aiot/namuen/hum"),
        }

        # Telegram Configuration
        self.TELEGRAM_TOKEN = os.getenv("TELEGRAM_TOKEN")
        self.ADMIN_USER_IDS = parse_admin_ids(os.getenv("ADMIN_USER_IDS"))

        # Alerting Configuration
        self.DEFAULT_TEMP_THRESHOLD = DEFAULT_TEMP_THRESHOLD
        self.TEMP_THRESHOLD_MIN = float(os.getenv("TEMP_THRESHOLD_MIN", "-40"))
        self.TEMP_THRESHOLD_MAX = float(os.getenv("TEMP_THRESHOLD_MAX", "125"))
        self.LOCAL_TZ = ZoneInfo(os.getenv("TIMEZONE", "Asia/Bangkok"))

        # Persisted bot settings (log/alert chat, threshold)
        self.CONFIG_FILE = os.getenv(
            "BOT_CONFIG_FILE",
            "/data/config.json" if os.path.exists("/data") else "config.json"
        )

        # Web / keepalive
        self.WEB_PORT = int(os.getenv("PORT", "8080"))
        self.KEEPALIVE_URL = os.getenv("KEEPALIVE_URL", "")
        self.KEEPALIVE_INTERVAL = 1800  # 30 menit

        self.validate()

    def validate(self):
        """Validasi konfigurasi yang diperlukan"""
        if not all([self.MQTT_BROKER, self.TELEGRAM_TOKEN]):
            logger.error("Missing required environment variables (MQTT_SERVER / TELEGRAM_TOKEN)")
            sys.exit(1)

        if self.TEMP_THRESHOLD_MIN > self.TEMP_THRESHOLD_MAX:
            logger.error(
                f"TEMP_THRESHOLD_MIN ({self.TEMP_THRESHOLD_MIN}) is above "
                f"TEMP_THRESHOLD_MAX ({self.TEMP_THRESHOLD_MAX})"
            )
            sys.exit(1)

        logger.info(f"Config loaded - Broker: {self.MQTT_BROKER}:{self.MQTT_PORT}")

    def get_local_time(self):
        """Get current time in the configured timezone"""
        return datetime.datetime.now(self.LOCAL_TZ)

    def format_local_time(self, dt=None):
        """Format time with timezone for messages"""
        if dt is None:
            dt = self.get_local_time()
        return dt.strftime("%Y-%m-%d %H:%M:%S %Z")
