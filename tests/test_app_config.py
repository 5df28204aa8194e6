from __future__ import annotations

import json
from pathlib import Path

import pytest

from livecaps.app import config as app_config
from livecaps.contracts import TranslationPair


def test_load_default_config_contains_expected_keys() -> None:
    cfg = app_config.load_default_config()
    assert cfg["speaking_languages"] == ["en-US"]
    assert cfg["stt_version"] in app_config.STT_VERSIONS
    assert "overlay_hide_ms" in cfg
    assert "queue_maxsize" in cfg


def test_load_default_config_is_a_copy() -> None:
    cfg = app_config.load_default_config()
    cfg["speaking_languages"].append("fr-FR")
    assert app_config.DEFAULTS["speaking_languages"] == ["en-US"]


def test_resolve_defaults_uses_explicit_config(tmp_path: Path) -> None:
    cfg_path = tmp_path / "explicit.json"
    cfg_path.write_text(json.dumps({"stt_version": "6.x", "overlay_hide_ms": 2500}), encoding="utf-8")
    defaults, used = app_config.resolve_defaults(str(cfg_path))
    assert used == cfg_path
    assert defaults["stt_version"] == "6.x"
    assert defaults["overlay_hide_ms"] == 2500


def test_missing_explicit_config_exits(tmp_path: Path) -> None:
    with pytest.raises(SystemExit, match="Config file not found"):
        app_config.load_user_config(str(tmp_path / "nope.json"))


def test_ensure_user_config_exists_creates_file(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(app_config, "user_config_dir", lambda appname, appauthor=None: str(tmp_path))
    created = app_config.ensure_user_config_exists({"speaking_languages": ["ja-JP"], "log_level": "DEBUG"})
    assert created.exists()
    assert created.parent == tmp_path
    loaded = json.loads(created.read_text(encoding="utf-8"))
    assert loaded["speaking_languages"] == ["ja-JP"]
    assert loaded["log_level"] == "DEBUG"


def test_load_user_config_ignores_unknown_keys(tmp_path: Path) -> None:
    cfg_path = tmp_path / "user.json"
    cfg_path.write_text(
        json.dumps({"speaking_languages": ["fr-FR"], "viewer_language": "es-ES", "unexpected": 1}),
        encoding="utf-8",
    )
    loaded, used = app_config.load_user_config(str(cfg_path))
    assert used == cfg_path
    assert loaded["speaking_languages"] == ["fr-FR"]
    assert loaded["viewer_language"] == "es-ES"
    assert "unexpected" not in loaded


def test_load_user_config_accepts_bom(tmp_path: Path) -> None:
    cfg_path = tmp_path / "bom.json"
    cfg_path.write_bytes(b"\xef\xbb\xbf" + json.dumps({"log_level": "WARNING"}).encode("utf-8"))
    loaded, _ = app_config.load_user_config(str(cfg_path))
    assert loaded["log_level"] == "WARNING"


def test_language_limits_follow_stt_version() -> None:
    assert app_config.max_languages("7.x") == 4
    assert app_config.max_languages("6.x") == 2


def test_validate_language_config_reports_notices() -> None:
    cfg = {
        "stt_version": "6.x",
        "speaking_languages": ["en-US", "fr-FR", "de-DE"],
        "translation_pairs": [
            {"source": "en-US", "targets": ["es-ES", "fr-FR", "de-DE", "ja-JP", "ko-KR", "ru-RU"]},
            {"source": "fr-FR", "targets": ["en-US"]},
            {"source": "de-DE", "targets": ["en-US"]},
            {"source": "", "targets": ["en-US"]},
        ],
    }
    codes = [n.code for n in app_config.validate_language_config(cfg)]
    assert codes == [
        "too_many_speaking_languages",
        "incomplete_translation_pair",
        "too_many_translation_sources",
        "too_many_targets",
    ]


def test_validate_language_config_requires_speaking_language() -> None:
    codes = [n.code for n in app_config.validate_language_config({"speaking_languages": []})]
    assert codes == ["no_speaking_languages"]


def test_language_set_from_config_consolidates_and_clamps() -> None:
    languages = app_config.language_set_from_config(
        {
            "stt_version": "7.x",
            "speaking_languages": ["en-US", " ", "fr-FR"],
            "translation_pairs": [
                {"source": "en-US", "targets": ["es-ES"]},
                {"source": "en-US", "targets": ["es-ES", "ru-RU"]},
                {"source": "fr-FR", "targets": []},
            ],
        }
    )
    assert languages.speaking == ("en-US", "fr-FR")
    assert languages.translation_pairs == (
        TranslationPair(source="en-US", targets=("es-ES", "ru-RU")),
    )
