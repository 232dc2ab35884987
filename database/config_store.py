import json
import logging
import math
import os
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_TEMP_THRESHOLD = 30.0


class InvalidThresholdError(ValueError):
    """Raised when a threshold falls outside the accepted range."""


class ConfigFormatError(ValueError):
    """Raised when the persisted config file has an unexpected shape."""


@dataclass
class BotConfig:
    log_channel_id: Optional[str] = None
    alert_channel_id: Optional[str] = None
    temp_threshold: float = DEFAULT_TEMP_THRESHOLD

    def to_dict(self):
        return {
            "logChannelId": self.log_channel_id,
            "alertChannelId": self.alert_channel_id,
            "tempThreshold": self.temp_threshold,
        }

    @classmethod
    def from_dict(cls, data, default_threshold=DEFAULT_TEMP_THRESHOLD):
        if not isinstance(data, dict):
            raise ConfigFormatError(f"expected a JSON object, got {type(data).__name__}")

        threshold = data.get("tempThreshold", default_threshold)
        if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
            raise ConfigFormatError(f"tempThreshold is not a number: {threshold!r}")
        if not math.isfinite(threshold):
            raise ConfigFormatError(f"tempThreshold is not finite: {threshold!r}")

        return cls(
            log_channel_id=_channel_id(data.get("logChannelId")),
            alert_channel_id=_channel_id(data.get("alertChannelId")),
            temp_threshold=float(threshold),
        )


def _channel_id(value):
    if value is None or value == "":
        return None
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise ConfigFormatError(f"channel id is not a string: {value!r}")
    return str(value)


class ConfigStore:
    """Class untuk mengelola penyimpanan konfigurasi bot (log chat, alert chat, threshold)"""

    def __init__(self, path, default_threshold=DEFAULT_TEMP_THRESHOLD,
                 min_threshold=None, max_threshold=None):
        self.path = path
        self.default_threshold = float(default_threshold)
        self.min_threshold = min_threshold
        self.max_threshold = max_threshold
        self.config = self.load()

    def _defaults(self):
        return BotConfig(temp_threshold=self.default_threshold)

    def load(self):
        """Read the whole config file; fall back to defaults and rewrite on any problem"""
        if not os.path.exists(self.path):
            logger.info(f"Config file {self.path} not found, creating defaults")
            return self._write_defaults()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = f.read()
            if raw.strip() == "":
                logger.warning(f"Config file {self.path} is empty, writing defaults")
                return self._write_defaults()
            config = BotConfig.from_dict(json.loads(raw), self.default_threshold)
            self.check_threshold(config.temp_threshold)
        except (OSError, ValueError) as e:
            logger.error(f"Config file {self.path} is unreadable or corrupt ({e}), recreating...")
            return self._write_defaults()

        logger.info(
            f"Config loaded - log chat: {config.log_channel_id}, "
            f"alert chat: {config.alert_channel_id}, threshold: {config.temp_threshold}°C"
        )
        return config

    def _write_defaults(self):
        config = self._defaults()
        self._write(config)
        return config

    def _write(self, config):
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(config.to_dict(), f, indent=2)
            return True
        except OSError as e:
            logger.error(f"Error writing config file {self.path}: {e}")
            return False

    def save(self):
        """Rewrite the whole config file from memory"""
        return self._write(self.config)

    # === Administrative mutations ===
    def set_log_channel(self, channel_id):
        self.config.log_channel_id = str(channel_id)
        self.save()
        logger.info(f"Log chat set to {channel_id}")
        return self.config

    def set_alert_channel(self, channel_id):
        self.config.alert_channel_id = str(channel_id)
        self.save()
        logger.info(f"Alert chat set to {channel_id}")
        return self.config

    def check_threshold(self, threshold):
        """Raise InvalidThresholdError unless threshold is finite and within bounds"""
        if not math.isfinite(threshold):
            raise InvalidThresholdError("threshold must be a number")
        if self.min_threshold is not None and threshold < self.min_threshold:
            raise InvalidThresholdError(
                f"threshold {threshold:g}°C is below the minimum {self.min_threshold:g}°C"
            )
        if self.max_threshold is not None and threshold > self.max_threshold:
            raise InvalidThresholdError(
                f"threshold {threshold:g}°C is above the maximum {self.max_threshold:g}°C"
            )

    def set_threshold(self, value):
        """Validate and persist a new temperature threshold"""
        threshold = float(value)
        self.check_threshold(threshold)
        self.config.temp_threshold = threshold
        self.save()
        logger.info(f"Temperature threshold set to {threshold:g}°C")
        return self.config
