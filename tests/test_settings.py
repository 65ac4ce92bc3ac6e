from pathlib import Path

import pytest
from pydantic import ValidationError

from fuzzpatch.models import DiffError
from fuzzpatch.settings import LocatorSettings, LogLevel, Settings, load_settings


def _write_tmp(tmp_path: Path, name: str, text: str) -> Path:
    p = tmp_path / name
    p.write_text(text, encoding="utf-8")
    return p


def test_defaults_match_engine_constants():
    settings = Settings()

    assert settings.locator.exact_search_radius == 50
    assert settings.locator.anchor_search_radius == 100
    assert settings.locator.similar_search_radius == 100
    assert settings.locator.similar_min_prefix_len == 3
    assert settings.extractor.fence_tag == "diff"
    assert settings.extractor.unknown_file_name == "Unknown file"
    assert settings.logging.default_level == LogLevel.warning


def test_yaml_with_variables_and_env(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("FP_ANCHOR_RADIUS", "12")
    cfg = """
variables:
  RADIUS: 7
locator:
  exact_search_radius: ${RADIUS}
  anchor_search_radius: ${env:FP_ANCHOR_RADIUS}
extractor:
  unknown_file_name: "unknown ${RADIUS} $${RADIUS}"
logging:
  default_level: debug
  enabled_loggers:
    fuzzpatch.cli: error
"""
    settings = load_settings(_write_tmp(tmp_path, "config.yaml", cfg))

    assert settings.locator.exact_search_radius == 7
    assert settings.locator.anchor_search_radius == 12
    assert settings.extractor.unknown_file_name == "unknown 7 ${RADIUS}"
    assert settings.logging.default_level == LogLevel.debug
    assert settings.logging.enabled_loggers == {"fuzzpatch.cli": LogLevel.error}


def test_unknown_variables_are_left_alone(tmp_path: Path) -> None:
    cfg = 'extractor:\n  unknown_file_name: "${NOPE}"\n'
    settings = load_settings(_write_tmp(tmp_path, "config.yml", cfg))

    assert settings.extractor.unknown_file_name == "${NOPE}"


def test_json5_config(tmp_path: Path) -> None:
    cfg = """
{
  // comments are fine in json5
  extractor: { fence_tag: "patch" },
}
"""
    settings = load_settings(_write_tmp(tmp_path, "config.json5", cfg))

    assert settings.extractor.fence_tag == "patch"
    assert settings.locator.exact_search_radius == 50


def test_empty_file_gives_defaults(tmp_path: Path) -> None:
    settings = load_settings(_write_tmp(tmp_path, "config.yaml", ""))

    assert settings == Settings()


def test_unsupported_extension(tmp_path: Path) -> None:
    with pytest.raises(DiffError):
        load_settings(_write_tmp(tmp_path, "config.toml", "a = 1"))


def test_root_must_be_mapping(tmp_path: Path) -> None:
    with pytest.raises(DiffError):
        load_settings(_write_tmp(tmp_path, "config.yaml", "- a\n- b\n"))


def test_invalid_values_are_rejected():
    with pytest.raises(ValidationError):
        LocatorSettings(exact_search_radius=-1)
    with pytest.raises(ValidationError):
        Settings.model_validate({"extractor": {"fence_tag": "  "}})
