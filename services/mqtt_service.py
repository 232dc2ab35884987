import logging
import paho.mqtt.client as mqtt
from typing import Callable

logger = logging.getLogger(__name__)

RECONNECT_MIN_DELAY = 5    # detik
RECONNECT_MAX_DELAY = 300  # 5 menit
KEEPALIVE_SECONDS = 60


class MQTTService:
    """Service untuk mengelola koneksi MQTT ke sensor node"""

    def __init__(self, config, message_callback: Callable[[str, bytes], None]):
        self.config = config
        self.message_callback = message_callback
        self.client = None
        self.is_connected = False

        # Subscribe to all configured topics
        self.subscribed_topics = [topic for topic in self.config.MQTT_TOPICS.values() if topic]

    def _create_client(self):
        client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2)
        if self.config.MQTT_USER:
            client.username_pw_set(self.config.MQTT_USER, self.config.MQTT_PASS)
        if self.config.MQTT_TLS:
            client.tls_set()
        client.reconnect_delay_set(min_delay=RECONNECT_MIN_DELAY, max_delay=RECONNECT_MAX_DELAY)
        client.on_connect = self._on_connect
        client.on_message = self._on_message
        client.on_disconnect = self._on_disconnect
        return client

    def connect(self):
        """Establish MQTT connection; paho keeps reconnecting in its network thread"""
        self.client = self._create_client()
        logger.info(f"Connecting to MQTT broker: {self.config.MQTT_BROKER}:{self.config.MQTT_PORT}")
        self.client.connect_async(self.config.MQTT_BROKER, self.config.MQTT_PORT, KEEPALIVE_SECONDS)
        self.client.loop_start()

    def disconnect(self):
        """Disconnect from MQTT broker"""
        if self.client:
            self.client.disconnect()
            self.client.loop_stop()
            self.client = None
        self.is_connected = False

    def _on_connect(self, client, userdata, flags, reason_code, properties):
        """Callback ketika terkoneksi ke MQTT broker"""
        if reason_code.is_failure:
            logger.error(f"Failed to connect to MQTT broker: {reason_code}")
            return

        self.is_connected = True
        logger.info("Connected to MQTT broker successfully")

        # Subscribe ulang setiap kali (re)connect
        for topic in self.subscribed_topics:
            client.subscribe(topic)
            logger.info(f"Subscribed to topic: {topic}")

    def _on_disconnect(self, client, userdata, flags, reason_code, properties):
        """Callback ketika terputus dari MQTT broker"""
        self.is_connected = False
        if reason_code.is_failure:
            logger.warning(f"Disconnected from MQTT broker ({reason_code}), reconnecting...")
        else:
            logger.info("Disconnected from MQTT broker")

    def _on_message(self, client, userdata, msg):
        """Callback ketika menerima pesan MQTT"""
        try:
            logger.debug(f"Received MQTT message - Topic: {msg.topic}, Payload: {msg.payload!r}")
            self.message_callback(msg.topic, msg.payload)
        except Exception as e:
            logger.error(f"Error processing MQTT message from {msg.topic}: {e}")
