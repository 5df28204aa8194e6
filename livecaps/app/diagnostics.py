from __future__ import annotations

_NOISE_PREFIXES = ("File ", "^", "Traceback ")

# (needles, hint); the first entry with any needle in the summary wins
_HINTS: tuple[tuple[tuple[str, ...], str], ...] = (
    (
        ("no speaking languages",),
        "Add at least one speaking language (e.g. en-US) in the config or with --speaking-languages.",
    ),
    (
        ("no module named",),
        "A required package is missing in this virtualenv. Reinstall dependencies and retry.",
    ),
    (
        ("config file not found",),
        "Configured JSON file is missing. Update the config path or restore the file.",
    ),
    (
        ("corrupt utterance payload", "unknown data_type"),
        "A stream message could not be decoded and was dropped; later messages are unaffected.",
    ),
    (
        ("capture line",),
        "The capture file has a malformed line. Each line must be a JSON object with uid and payload_b64.",
    ),
)
DEFAULT_HINT = "Check logs for full traceback."


def summarize_exception(detail: str, *, max_len: int = 220) -> str:
    """Last meaningful line of a traceback or error text, clipped to max_len."""
    lines = [ln.strip() for ln in str(detail or "").splitlines() if ln.strip()]
    if not lines:
        return "Unknown error."
    meaningful = [ln for ln in lines if not ln.startswith(_NOISE_PREFIXES)]
    out = meaningful[-1] if meaningful else lines[-1]
    if len(out) > max_len:
        return out[: max_len - 3].rstrip() + "..."
    return out


def hint_for_exception(summary: str) -> str:
    s = str(summary or "").lower()
    for needles, hint in _HINTS:
        if any(n in s for n in needles):
            return hint
    return DEFAULT_HINT
