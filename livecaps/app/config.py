from __future__ import annotations

import argparse
import copy
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from livecaps.contracts import LanguageSet, TranslationPair, consolidate_pairs


DEFAULTS: dict[str, Any] = {
    "speaking_languages": ["en-US"],
    "translation_pairs": [],
    "stt_version": "7.x",
    "overlay_hide_ms": 5000,
    "log_level": "INFO",
    "export_format": "text",
    "viewer_language": None,
    "queue_maxsize": 100,
}
CONFIG_KEYS: tuple[str, ...] = tuple(DEFAULTS.keys())

STT_VERSIONS: tuple[str, ...] = ("7.x", "6.x")
EXPORT_FORMATS: tuple[str, ...] = ("text", "csv", "json")
MAX_TARGETS_PER_SOURCE = 5


@dataclass(frozen=True)
class AppPaths:
    config_dir: Path
    config_path: Path


@dataclass(frozen=True)
class ConfigNotice:
    code: str
    message: str


def app_paths() -> AppPaths:
    config_dir = Path(user_config_dir("LiveCaps", "LiveCaps"))
    return AppPaths(config_dir=config_dir, config_path=config_dir / "config.json")


def _load_json_dict(path: Path) -> dict[str, Any]:
    # Accept UTF-8 with or without BOM for Windows-edited config files.
    with path.open("r", encoding="utf-8-sig") as f:
        loaded = json.load(f)
    if not isinstance(loaded, dict):
        raise ValueError(f"config must be a JSON object: {path}")
    return loaded


def _write_json_dict(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)
        f.write("\n")


def _known_only(payload: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key in CONFIG_KEYS:
        if key in payload:
            out[key] = payload[key]
    return out


def load_default_config() -> dict[str, Any]:
    return copy.deepcopy(DEFAULTS)


def load_user_config(config_path: str | None = None) -> tuple[dict[str, Any], Path]:
    defaults = load_default_config()
    if config_path:
        chosen = Path(config_path)
        if not chosen.exists():
            raise SystemExit(f"Config file not found: {chosen}")
    else:
        chosen = ensure_user_config_exists(defaults)
    merged = dict(defaults)
    merged.update(_known_only(_load_json_dict(chosen)))
    return merged, chosen


def ensure_user_config_exists(defaults: dict[str, Any] | None = None) -> Path:
    paths = app_paths()
    if paths.config_path.exists():
        return paths.config_path
    _write_json_dict(paths.config_path, defaults or load_default_config())
    return paths.config_path


def resolve_defaults(config_path: str | None = None) -> tuple[dict[str, Any], Path]:
    return load_user_config(config_path=config_path)


def max_languages(stt_version: str) -> int:
    return 4 if str(stt_version) == "7.x" else 2


def _clean_speaking(values: Any) -> list[str]:
    return [str(v).strip() for v in (values or []) if str(v).strip()]


def _clean_pairs(values: Any) -> list[TranslationPair]:
    pairs: list[TranslationPair] = []
    for raw in values or []:
        if not isinstance(raw, dict):
            continue
        source = str(raw.get("source") or "").strip()
        targets = tuple(str(t).strip() for t in (raw.get("targets") or []) if str(t).strip())
        if source and targets:
            pairs.append(TranslationPair(source=source, targets=targets))
    return pairs


def validate_language_config(cfg: dict[str, Any]) -> list[ConfigNotice]:
    notices: list[ConfigNotice] = []
    version = str(cfg.get("stt_version", "7.x"))
    limit = max_languages(version)
    speaking = _clean_speaking(cfg.get("speaking_languages"))
    if not speaking:
        notices.append(ConfigNotice("no_speaking_languages", "No speaking languages configured."))
    elif len(speaking) > limit:
        notices.append(
            ConfigNotice(
                "too_many_speaking_languages",
                f"Maximum {limit} speaking languages allowed for {version}; extra entries are ignored.",
            )
        )
    raw_pairs = cfg.get("translation_pairs") or []
    cleaned = _clean_pairs(raw_pairs)
    pairs = consolidate_pairs(cleaned)
    if len(cleaned) < len(raw_pairs):
        notices.append(
            ConfigNotice("incomplete_translation_pair", "Translation pairs without a source or targets are ignored.")
        )
    if len(pairs) > limit:
        notices.append(
            ConfigNotice(
                "too_many_translation_sources",
                f"Maximum {limit} source languages allowed for {version}; extra pairs are ignored.",
            )
        )
    for pair in pairs:
        if len(pair.targets) > MAX_TARGETS_PER_SOURCE:
            notices.append(
                ConfigNotice(
                    "too_many_targets",
                    f"Maximum {MAX_TARGETS_PER_SOURCE} target languages allowed per source ({pair.source}).",
                )
            )
    return notices


def language_set_from_config(cfg: dict[str, Any]) -> LanguageSet:
    limit = max_languages(str(cfg.get("stt_version", "7.x")))
    speaking = _clean_speaking(cfg.get("speaking_languages"))[:limit]
    pairs = consolidate_pairs(_clean_pairs(cfg.get("translation_pairs")))[:limit]
    return LanguageSet(
        speaking=tuple(speaking),
        translation_pairs=tuple(
            TranslationPair(source=p.source, targets=p.targets[:MAX_TARGETS_PER_SOURCE]) for p in pairs
        ),
    )


def _comma_list(value: str) -> list[str]:
    return [v.strip() for v in str(value or "").split(",") if v.strip()]


def _pair_arg(value: str) -> dict[str, Any]:
    source, sep, targets = str(value).partition(":")
    if not sep or not source.strip():
        raise argparse.ArgumentTypeError(f"expected SOURCE:TARGET[,TARGET...], got {value!r}")
    return {"source": source.strip(), "targets": _comma_list(targets)}


def parser_with_defaults(defaults: dict[str, Any]) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="livecaps")
    p.add_argument("--config", default=None, help="JSON config path (CLI flags override config)")
    p.add_argument(
        "--speaking-languages",
        type=_comma_list,
        default=defaults["speaking_languages"],
        help="comma separated speaking languages, e.g. en-US,fr-FR",
    )
    p.add_argument(
        "--translation-pair",
        dest="translation_pairs",
        type=_pair_arg,
        action="append",
        default=None,
        help="SOURCE:TARGET[,TARGET...]; repeat for several sources",
    )
    p.add_argument("--stt-version", default=defaults["stt_version"], choices=list(STT_VERSIONS))
    p.add_argument(
        "--overlay-hide-ms",
        type=int,
        default=defaults["overlay_hide_ms"],
        help="hide a speaker's overlay after this many ms without messages",
    )
    p.add_argument("--log-level", default=defaults["log_level"], help="logger level for the JSON log")
    p.add_argument(
        "--queue-maxsize",
        type=int,
        default=defaults["queue_maxsize"],
        help="max overlay events queued between timers and UI",
    )

    sub = p.add_subparsers(dest="command", required=True)

    replay = sub.add_parser("replay", help="feed a capture file through the reconciler")
    replay.add_argument("capture", help="JSON lines capture file")
    replay.add_argument(
        "--export",
        default=defaults["export_format"],
        choices=list(EXPORT_FORMATS),
        help="text transcript, word-frequency csv, or grouped json",
    )
    replay.add_argument("--out", default=None, help="write export here instead of stdout")
    replay.add_argument(
        "--session-languages",
        type=_comma_list,
        default=None,
        help="treat this participant as transcribing with these speaking languages",
    )
    replay.add_argument(
        "--viewer-language",
        default=defaults["viewer_language"],
        help="target language to show in live captions",
    )
    replay.add_argument("--language", default=None, help="restrict csv export to one language")
    replay.add_argument(
        "--live",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="print live captions and overlay transitions while replaying",
    )

    sub.add_parser("languages", help="print offered translation pairs and config notices")
    return p


def resolve_args(argv: list[str] | None = None) -> argparse.Namespace:
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--config", default=None)
    pre_args, _ = pre.parse_known_args(argv)
    defaults, _ = resolve_defaults(config_path=pre_args.config)
    parser = parser_with_defaults(defaults)
    args = parser.parse_args(argv)
    if args.translation_pairs is None:
        args.translation_pairs = list(defaults["translation_pairs"])
    return args
