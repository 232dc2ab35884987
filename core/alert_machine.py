"""Alert/log state machine for the temperature/humidity stream.

Turns the continuous stream of sensor readings into discrete notifications:

* an over-threshold alert, at most once per excursion above the threshold;
* a sustained-high (fire risk) alert once an excursion has lasted
  ``SUSTAINED_HIGH_DURATION``, measured between event timestamps;
* a combined sensor log, debounced so that near-simultaneous temperature and
  humidity messages produce a single notification.

Every entry point must run on the same execution context (the bot's event
loop); nothing here is locked.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional

from core import notifications
from core.readings import Reading, ReadingKind, decode_value

logger = logging.getLogger(__name__)

LOG_DEBOUNCE_SECONDS = 1.0
SUSTAINED_HIGH_DURATION = timedelta(minutes=10)


@dataclass
class LatestReadings:
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    last_update_time: Optional[datetime] = None


@dataclass
class AlertState:
    high_temp_start: Optional[datetime] = None
    alert_sent: bool = False
    fire_alert_sent: bool = False

    def reset(self):
        self.high_temp_start = None
        self.alert_sent = False
        self.fire_alert_sent = False


@dataclass
class LogDebounce:
    pending: bool = False
    handle: Any = None


@dataclass(frozen=True)
class StatusSnapshot:
    temperature: float
    humidity: float
    as_of: Optional[datetime]


class AlertStateMachine:
    """Core bridge state: latest readings, alert latches and log debounce"""

    def __init__(self, config_store, sink, scheduler, clock, topics=None):
        self.config_store = config_store
        self.sink = sink
        self.scheduler = scheduler
        self.clock = clock
        self.topic_kinds = {
            topic: ReadingKind(kind) for kind, topic in (topics or {}).items() if topic
        }

        self.latest = LatestReadings()
        self.alert_state = AlertState()
        self.log_debounce = LogDebounce()

    # === Ingress ===
    def handle_message(self, topic, payload):
        """Callback untuk setiap pesan MQTT (topic, raw payload bytes)"""
        kind = self.topic_kinds.get(topic)
        if kind is None:
            logger.debug(f"Ignoring message on unknown topic {topic}")
            return

        reading = Reading(kind=kind, value=decode_value(payload), observed_at=self.clock())
        logger.info(f"Data {kind.value} diterima: {reading.value}")
        self.handle_reading(reading)

    def handle_reading(self, reading: Reading):
        config = self.config_store.config

        self._update_latest(reading)

        if reading.kind is ReadingKind.TEMPERATURE:
            if not reading.is_valid:
                logger.warning("Invalid temperature reading, skipping threshold evaluation")
            elif reading.value > config.temp_threshold:
                if config.alert_channel_id:
                    self._check_excursion(reading, config)
            else:
                self.alert_state.reset()

        if config.log_channel_id and not self.log_debounce.pending:
            self._schedule_log()

    def _update_latest(self, reading):
        if reading.kind is ReadingKind.TEMPERATURE:
            self.latest.temperature = reading.value
        elif reading.kind is ReadingKind.HUMIDITY:
            self.latest.humidity = reading.value
        self.latest.last_update_time = reading.observed_at

    # === Threshold alerts ===
    def _check_excursion(self, reading, config):
        state = self.alert_state
        destination = config.alert_channel_id

        if not state.alert_sent:
            self._dispatch(destination, notifications.over_threshold(
                reading.value, config.temp_threshold, reading.observed_at
            ))
            state.alert_sent = True
            logger.warning(
                f"Temperature {reading.value}°C above threshold {config.temp_threshold}°C"
            )

        if state.high_temp_start is None:
            state.high_temp_start = reading.observed_at
            return

        elapsed = reading.observed_at - state.high_temp_start
        if elapsed >= SUSTAINED_HIGH_DURATION and not state.fire_alert_sent:
            self._dispatch(destination, notifications.sustained_high(
                config.temp_threshold,
                SUSTAINED_HIGH_DURATION.total_seconds() / 60,
                reading.observed_at,
            ))
            state.fire_alert_sent = True
            logger.warning(f"Temperature above threshold for {elapsed}, fire risk alert sent")

    # === Debounced log ===
    def _schedule_log(self):
        self.log_debounce.pending = True
        self.log_debounce.handle = self.scheduler.call_later(LOG_DEBOUNCE_SECONDS, self.emit_log)

    def emit_log(self):
        """Send one combined log with the readings known right now"""
        try:
            destination = self.config_store.config.log_channel_id
            latest = self.latest
            has_data = latest.temperature is not None or latest.humidity is not None
            if destination and has_data:
                self._dispatch(destination, notifications.sensor_log(
                    latest.temperature, latest.humidity, latest.last_update_time
                ))
        finally:
            self.log_debounce.pending = False
            self.log_debounce.handle = None

    def _dispatch(self, destination, notification):
        try:
            self.sink.send(destination, notification)
        except Exception as e:
            logger.error(f"Failed to hand {notification.kind.value} notification to sink: {e}")

    # === Status query ===
    def status_snapshot(self) -> Optional[StatusSnapshot]:
        latest = self.latest
        if latest.temperature is None or latest.humidity is None:
            return None
        return StatusSnapshot(
            temperature=latest.temperature,
            humidity=latest.humidity,
            as_of=latest.last_update_time,
        )
