import asyncio
import threading
import logging
from flask import Flask

from config.settings import BridgeConfig
from core.alert_machine import AlertStateMachine
from core.scheduler import AsyncioScheduler
from database.config_store import ConfigStore
from services.mqtt_service import MQTTService
from services.telegram_service import TelegramService
from tasks.keepalive_task import KeepaliveTask
from web.routes import WebRoutes

logger = logging.getLogger(__name__)


class SensorBridgeMonitor:
    """Main monitor class: MQTT sensor -> alert state machine -> Telegram bot"""

    def __init__(self, config=None):
        self.config = config or BridgeConfig()
        self.loop = None

        self.config_store = ConfigStore(
            self.config.CONFIG_FILE,
            default_threshold=self.config.DEFAULT_TEMP_THRESHOLD,
            min_threshold=self.config.TEMP_THRESHOLD_MIN,
            max_threshold=self.config.TEMP_THRESHOLD_MAX,
        )

        # Initialize components
        self.telegram_service = TelegramService(
            self.config,
            self.config_store,
            status_provider=self.status_snapshot,
            on_startup=self._on_bot_started,
            on_shutdown=self._on_bot_stopped,
        )
        self.alert_machine = AlertStateMachine(
            self.config_store,
            sink=self.telegram_service,
            scheduler=AsyncioScheduler(),
            clock=self.config.get_local_time,
            topics=self.config.MQTT_TOPICS,
        )
        self.mqtt_service = MQTTService(self.config, self._on_mqtt_message)
        self.tasks = []

    def status_snapshot(self):
        return self.alert_machine.status_snapshot()

    def _on_mqtt_message(self, topic, payload):
        """Dipanggil dari thread MQTT; pindahkan ke event loop bot"""
        if self.loop is None or self.loop.is_closed():
            logger.warning(f"Event loop not ready, dropping message from {topic}")
            return
        self.loop.call_soon_threadsafe(self.alert_machine.handle_message, topic, payload)

    def _on_bot_started(self):
        self.loop = asyncio.get_running_loop()
        self.mqtt_service.connect()

    def _on_bot_stopped(self):
        self.mqtt_service.disconnect()
        self.loop = None

    def start_background_tasks(self):
        """Memulai semua background tasks"""
        self.tasks.append(KeepaliveTask(self.config))

        for task in self.tasks:
            task.start()

        logger.info("All background tasks started")

    def stop_background_tasks(self):
        """Stop semua background tasks"""
        for task in self.tasks:
            task.stop()
        logger.info("All background tasks stopped")

    def create_flask_app(self):
        """Create dan configure Flask application"""
        app = Flask(__name__)
        web_routes = WebRoutes(self.config, self)
        web_routes.register_routes(app)
        return app

    def run(self):
        """Run the complete bridge; blocks until the bot is stopped"""
        try:
            self.start_background_tasks()

            app = self.create_flask_app()
            flask_thread = threading.Thread(
                target=lambda: app.run(host="0.0.0.0", port=self.config.WEB_PORT),
                daemon=True,
                name="FlaskServer",
            )
            flask_thread.start()

            # Polling berjalan sampai SIGINT/SIGTERM
            self.telegram_service.start_polling()
        except KeyboardInterrupt:
            logger.info("Shutting down...")
        finally:
            self.stop_background_tasks()
            self.mqtt_service.disconnect()
