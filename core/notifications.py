"""Structured notification records sent by the bridge.

Rendering to a particular chat platform is the sink's job; this module only
decides what a notification says.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

PLACEHOLDER = "-"
TIME_FORMAT = "%Y-%m-%d %H:%M:%S %Z"


class NotificationKind(Enum):
    OVER_THRESHOLD = "over_threshold"
    SUSTAINED_HIGH = "sustained_high"
    SENSOR_LOG = "sensor_log"
    STATUS = "status"


@dataclass(frozen=True)
class NotificationField:
    name: str
    value: str


@dataclass(frozen=True)
class Notification:
    kind: NotificationKind
    title: str
    description: str = ""
    fields: Tuple[NotificationField, ...] = field(default_factory=tuple)
    footer: str = ""


def format_measurement(value: Optional[float], unit: str) -> str:
    """Render a reading, or the placeholder when absent or not a number"""
    if value is None or math.isnan(value):
        return PLACEHOLDER
    return f"{value:g} {unit}"


def format_timestamp(dt) -> str:
    if dt is None:
        return PLACEHOLDER
    return dt.strftime(TIME_FORMAT)


def _reading_fields(temperature, humidity):
    return (
        NotificationField("🌡️ Temperature", format_measurement(temperature, "°C")),
        NotificationField("💧 Humidity", format_measurement(humidity, "%")),
    )


def over_threshold(temperature, threshold, at) -> Notification:
    return Notification(
        kind=NotificationKind.OVER_THRESHOLD,
        title="🚨 Temperature too high!",
        description=(
            f"Current temperature *{format_measurement(temperature, '°C')}* is above "
            f"the configured threshold (*{threshold:g} °C*)."
        ),
        footer=f"Alert time: {format_timestamp(at)}",
    )


def sustained_high(threshold, duration_minutes, at) -> Notification:
    return Notification(
        kind=NotificationKind.SUSTAINED_HIGH,
        title="🔥 Fire risk warning!",
        description=(
            f"Temperature has stayed above {threshold:g} °C for *{duration_minutes:g} minutes*.\n"
            "There may be a fire risk, check the area immediately!"
        ),
        footer=f"Alert time: {format_timestamp(at)}",
    )


def sensor_log(temperature, humidity, at) -> Notification:
    return Notification(
        kind=NotificationKind.SENSOR_LOG,
        title="📡 ESP32 sensor log",
        fields=_reading_fields(temperature, humidity),
        footer=f"Updated: {format_timestamp(at)}",
    )


def status_report(snapshot) -> Notification:
    return Notification(
        kind=NotificationKind.STATUS,
        title="📊 Latest status",
        fields=_reading_fields(snapshot.temperature, snapshot.humidity),
        footer=f"Updated: {format_timestamp(snapshot.as_of)}",
    )
