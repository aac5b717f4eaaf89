import json

import pytest

from bucket_wagon.config import DEFAULT_CONFIG, WagonConfig
from bucket_wagon.exceptions import ConfigurationError


def test_defaults():
    assert DEFAULT_CONFIG.endpoint_url is None
    assert DEFAULT_CONFIG.assume_stale_on_lookup_error is True


def test_from_dict():
    config = WagonConfig.from_dict({"region": "eu-central-003", "assume_stale_on_lookup_error": False})
    assert config.region == "eu-central-003"
    assert config.assume_stale_on_lookup_error is False


def test_unknown_keys_are_rejected():
    with pytest.raises(ConfigurationError, match="bucket_name"):
        WagonConfig.from_dict({"bucket_name": "oops"})


def test_from_json(tmp_path):
    path = tmp_path / "wagon.json"
    path.write_text(json.dumps({"endpoint_url": "http://localhost:9000"}))
    assert WagonConfig.from_json(path).endpoint_url == "http://localhost:9000"


def test_from_json_rejects_invalid_files(tmp_path):
    path = tmp_path / "wagon.json"
    path.write_text("[1, 2]")
    with pytest.raises(ConfigurationError):
        WagonConfig.from_json(path)
    with pytest.raises(ConfigurationError):
        WagonConfig.from_json(tmp_path / "missing.json")
