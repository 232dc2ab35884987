import requests
import logging
from .base_task import BackgroundTask

logger = logging.getLogger(__name__)


class KeepaliveTask(BackgroundTask):
    """Task untuk menjaga aplikasi tetap aktif di hosting yang men-suspend app idle"""

    def __init__(self, config):
        super().__init__(config.KEEPALIVE_INTERVAL, "KeepaliveTask")
        self.url = config.KEEPALIVE_URL

    def task(self):
        """Send keepalive request"""
        if not self.url:
            return
        try:
            response = requests.get(self.url, timeout=10)
            response.raise_for_status()
            logger.info("Keepalive request sent successfully")
        except requests.RequestException as e:
            logger.error(f"Keepalive error: {e}")
