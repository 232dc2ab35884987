from __future__ import annotations

import json

import pytest

from database.config_store import BotConfig, ConfigFormatError, ConfigStore, InvalidThresholdError


def read_json(path):
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def test_missing_file_creates_defaults(tmp_path) -> None:
    path = tmp_path / "config.json"
    store = ConfigStore(str(path))

    assert store.config == BotConfig()
    assert read_json(path) == {"logChannelId": None, "alertChannelId": None, "tempThreshold": 30.0}


@pytest.mark.parametrize(
    "content",
    [
        "",
        "   \n",
        "{not json",
        "[1, 2]",
        '{"tempThreshold": "hot"}',
        '{"alertChannelId": "-100", "tempThreshold": NaN}',
        '{"tempThreshold": Infinity}',
        '{"alertChannelId": "-100", "tempThreshold": 9999}',
        '{"tempThreshold": -273}',
    ],
)
def test_empty_or_corrupt_file_falls_back_to_defaults(tmp_path, content) -> None:
    path = tmp_path / "config.json"
    path.write_text(content, encoding="utf-8")

    store = ConfigStore(str(path), min_threshold=-40, max_threshold=125)

    assert store.config == BotConfig()
    assert read_json(path)["tempThreshold"] == 30.0


def test_existing_file_is_loaded(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"logChannelId": "123", "alertChannelId": "456", "tempThreshold": 28}))

    store = ConfigStore(str(path))

    assert store.config == BotConfig(log_channel_id="123", alert_channel_id="456", temp_threshold=28.0)


def test_missing_keys_use_defaults(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"alertChannelId": 789}))

    store = ConfigStore(str(path), default_threshold=31)

    assert store.config.alert_channel_id == "789"
    assert store.config.log_channel_id is None
    assert store.config.temp_threshold == 31.0


def test_setters_persist_whole_record(tmp_path) -> None:
    path = tmp_path / "config.json"
    store = ConfigStore(str(path))

    store.set_log_channel(-1001)
    store.set_alert_channel("-1002")
    store.set_threshold(35)

    assert read_json(path) == {"logChannelId": "-1001", "alertChannelId": "-1002", "tempThreshold": 35.0}
    assert ConfigStore(str(path)).config == store.config


def test_same_threshold_twice_only_rewrites(tmp_path) -> None:
    path = tmp_path / "config.json"
    store = ConfigStore(str(path))
    store.set_threshold(33)
    path.write_text("{}")

    store.set_threshold(33)

    assert read_json(path)["tempThreshold"] == 33.0
    assert store.config.temp_threshold == 33.0


@pytest.mark.parametrize("value", [-41, 126, float("nan")])
def test_threshold_outside_bounds_is_rejected(store, value) -> None:
    with pytest.raises(InvalidThresholdError):
        store.set_threshold(value)
    assert store.config.temp_threshold == 30.0


def test_threshold_bounds_are_inclusive(store) -> None:
    store.set_threshold(-40)
    store.set_threshold(125)
    assert store.config.temp_threshold == 125.0


def test_zero_threshold_is_accepted(store) -> None:
    store.set_threshold(0)
    assert store.config.temp_threshold == 0.0


def test_save_failure_keeps_value_in_memory(tmp_path) -> None:
    store = ConfigStore(str(tmp_path / "config.json"))
    store.path = str(tmp_path / "missing-dir" / "blocked")
    (tmp_path / "missing-dir").write_text("a file, not a directory")

    store.set_threshold(40)

    assert store.config.temp_threshold == 40.0
    assert store.save() is False


def test_from_dict_rejects_non_object() -> None:
    with pytest.raises(ConfigFormatError):
        BotConfig.from_dict(["not", "a", "dict"])
