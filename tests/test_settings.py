from __future__ import annotations

import pytest

from config.settings import BridgeConfig, parse_admin_ids, parse_broker_address


@pytest.mark.parametrize(
    ("server", "expected"),
    [
        ("mqtt://broker.hivemq.com", ("broker.hivemq.com", 1883, False)),
        ("mqtt://10.0.0.5:1884", ("10.0.0.5", 1884, False)),
        ("mqtts://broker.example.com", ("broker.example.com", 8883, True)),
        ("broker.local", ("broker.local", 1883, False)),
        ("broker.local:2883", ("broker.local", 2883, False)),
        (None, (None, 1883, False)),
    ],
)
def test_parse_broker_address(server, expected) -> None:
    assert parse_broker_address(server) == expected


def test_parse_admin_ids_skips_garbage() -> None:
    assert parse_admin_ids("12, 34,,abc, -5") == {12, 34, -5}
    assert parse_admin_ids(None) == set()


def test_config_from_environment(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("MQTT_SERVER", "mqtt://broker.test:1999")
    monkeypatch.setenv("TELEGRAM_TOKEN", "123:abc")
    monkeypatch.setenv("MQTT_TOPIC_TEMP", "lab/temp")
    monkeypatch.delenv("MQTT_TOPIC_HUM", raising=False)
    monkeypatch.setenv("BOT_CONFIG_FILE", str(tmp_path / "bot.json"))
    monkeypatch.setenv("TIMEZONE", "Asia/Bangkok")

    config = BridgeConfig()

    assert (config.MQTT_BROKER, config.MQTT_PORT) == ("broker.test", 1999)
    assert config.MQTT_TOPICS == {"temperature": "lab/temp", "humidity": "aiot/namuen/hum"}
    assert config.CONFIG_FILE == str(tmp_path / "bot.json")
    assert config.DEFAULT_TEMP_THRESHOLD == 30.0
    assert config.format_local_time().endswith("+07")


def test_missing_token_exits(monkeypatch) -> None:
    monkeypatch.setenv("MQTT_SERVER", "mqtt://broker.test")
    monkeypatch.delenv("TELEGRAM_TOKEN", raising=False)

    with pytest.raises(SystemExit):
        BridgeConfig()
