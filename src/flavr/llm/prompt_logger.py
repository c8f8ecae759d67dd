"""
Flavr - Prompt Logger.

Appends every external generation call (prompts, budget and raw response or
error) to a JSON-lines file per session, so a failed parse can be replayed
against flavr.llm.repair offline.

Enabled via FLAVR_LOG_PROMPTS=1 or the --log-prompts CLI flag.
"""

import json
import os
from datetime import datetime
from pathlib import Path

LOG_PROMPTS = os.getenv("FLAVR_LOG_PROMPTS", "0") == "1"
LOG_DIR = Path("prompt_logs")
LOG_FILE = "calls.jsonl"

_session_id: str | None = None
_call_counter: int = 0


def enable_prompt_logging(enabled: bool = True) -> None:
    """Turn prompt logging on or off for the rest of the process."""
    global LOG_PROMPTS
    LOG_PROMPTS = enabled


def _session_dir() -> Path:
    global _session_id
    if _session_id is None:
        _session_id = datetime.now().strftime("%Y%m%d_%H%M%S")
    path = LOG_DIR / _session_id
    path.mkdir(parents=True, exist_ok=True)
    return path


def log_prompt(
    *,
    tier: str,
    model: str,
    system_prompt: str,
    user_prompt: str,
    max_tokens: int,
    response: str | None = None,
    error: str | None = None,
) -> Path | None:
    """
    Append one generation call to the session log.

    Returns:
        Path to the session's log file, or None if logging is disabled
    """
    if not LOG_PROMPTS:
        return None

    global _call_counter
    _call_counter += 1

    entry = {
        "call": _call_counter,
        "at": datetime.now().isoformat(),
        "tier": tier,
        "model": model,
        "max_tokens": max_tokens,
        "system_prompt": system_prompt,
        "user_prompt": user_prompt,
        "response": response,
        "error": error,
    }
    filepath = _session_dir() / LOG_FILE
    with filepath.open("a", encoding="utf-8") as f:
        f.write(json.dumps(entry, ensure_ascii=False) + "\n")
    return filepath


def read_session_log() -> list[dict]:
    """Load every call logged so far in this session."""
    if _session_id is None:
        return []
    filepath = LOG_DIR / _session_id / LOG_FILE
    if not filepath.exists():
        return []
    with filepath.open(encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]


def get_session_log_dir() -> Path | None:
    """Get the current session's log directory, if logging is enabled."""
    if not LOG_PROMPTS:
        return None
    return _session_dir()


def reset_session() -> None:
    """Start a new session log (used by tests)."""
    global _session_id, _call_counter
    _session_id = None
    _call_counter = 0
