from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from covid19mx.config import default_config, load_config, resolve_config, save_config


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "config.yml"
    save_config(default_config(), path)

    config = load_config(path)

    assert config == default_config()
    assert config.municipal_categories.deaths == "Defunciones"
    assert config.municipal_catalog_path is None


def test_resolve_config_falls_back_to_defaults(tmp_path: Path) -> None:
    assert resolve_config(tmp_path / "missing.yml") == default_config()


def test_invalid_config_raises_validation_error(tmp_path: Path) -> None:
    path = tmp_path / "config.yml"
    payload = default_config().model_dump()
    payload["request_timeout_sec"] = 0
    path.write_text(yaml.safe_dump(payload), encoding="utf-8")
    with pytest.raises(ValidationError):
        load_config(path)
