"""Telemetry model for the sensor node: reading kinds, readings and payload decoding."""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

logger = logging.getLogger(__name__)


class ReadingKind(Enum):
    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"


@dataclass(frozen=True)
class Reading:
    kind: ReadingKind
    value: float
    observed_at: datetime

    @property
    def is_valid(self):
        return not math.isnan(self.value)


def decode_value(payload):
    """Decode a base-10 float payload; anything unparsable or non-finite becomes nan"""
    try:
        text = payload.decode("utf-8") if isinstance(payload, (bytes, bytearray)) else str(payload)
        value = float(text.strip())
    except (UnicodeDecodeError, ValueError):
        logger.warning(f"Cannot convert payload to float: {payload!r}")
        return math.nan

    if not math.isfinite(value):
        logger.warning(f"Non-finite payload treated as invalid: {payload!r}")
        return math.nan
    return value
