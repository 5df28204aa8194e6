from __future__ import annotations

import json
from pathlib import Path

import pytest

from livecaps.app.config import resolve_args


def test_app_resolve_args_cli_overrides_config(tmp_path: Path) -> None:
    cfg_path = tmp_path / "app.json"
    cfg_path.write_text(
        json.dumps(
            {
                "speaking_languages": ["en-US"],
                "stt_version": "6.x",
                "overlay_hide_ms": 4000,
            }
        ),
        encoding="utf-8",
    )
    args = resolve_args(
        [
            "--config",
            str(cfg_path),
            "--speaking-languages",
            "en-US, fr-FR",
            "--overlay-hide-ms",
            "1500",
            "languages",
        ]
    )
    assert args.speaking_languages == ["en-US", "fr-FR"]
    assert args.stt_version == "6.x"
    assert args.overlay_hide_ms == 1500
    assert args.command == "languages"


def test_app_resolve_args_translation_pairs_from_config(tmp_path: Path) -> None:
    cfg_path = tmp_path / "app.json"
    cfg_path.write_text(
        json.dumps({"translation_pairs": [{"source": "en-US", "targets": ["es-ES"]}]}),
        encoding="utf-8",
    )
    args = resolve_args(["--config", str(cfg_path), "languages"])
    assert args.translation_pairs == [{"source": "en-US", "targets": ["es-ES"]}]


def test_app_resolve_args_translation_pairs_cli_replace_config(tmp_path: Path) -> None:
    cfg_path = tmp_path / "app.json"
    cfg_path.write_text(
        json.dumps({"translation_pairs": [{"source": "en-US", "targets": ["es-ES"]}]}),
        encoding="utf-8",
    )
    args = resolve_args(
        [
            "--config",
            str(cfg_path),
            "--translation-pair",
            "en-US:ru-RU,ja-JP",
            "--translation-pair",
            "fr-FR:en-US",
            "languages",
        ]
    )
    assert args.translation_pairs == [
        {"source": "en-US", "targets": ["ru-RU", "ja-JP"]},
        {"source": "fr-FR", "targets": ["en-US"]},
    ]


def test_app_resolve_args_replay_options(tmp_path: Path) -> None:
    cfg_path = tmp_path / "app.json"
    cfg_path.write_text(json.dumps({"export_format": "csv", "viewer_language": "es-ES"}), encoding="utf-8")
    args = resolve_args(
        [
            "--config",
            str(cfg_path),
            "replay",
            "session.jsonl",
            "--session-languages",
            "en-US,fr-FR",
            "--live",
        ]
    )
    assert args.command == "replay"
    assert args.capture == "session.jsonl"
    assert args.export == "csv"
    assert args.viewer_language == "es-ES"
    assert args.session_languages == ["en-US", "fr-FR"]
    assert args.live is True


def test_app_resolve_args_rejects_bad_pair(tmp_path: Path) -> None:
    cfg_path = tmp_path / "app.json"
    cfg_path.write_text("{}", encoding="utf-8")
    with pytest.raises(SystemExit):
        resolve_args(["--config", str(cfg_path), "--translation-pair", "es-ES", "languages"])
