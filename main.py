#!/usr/bin/env python3
"""
Main entry point untuk sensor alert bridge
MQTT (ESP32 temperature/humidity) -> Telegram bot
"""

from core.monitor import SensorBridgeMonitor


def main():
    monitor = SensorBridgeMonitor()
    monitor.run()


if __name__ == "__main__":
    main()
