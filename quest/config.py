from __future__ import annotations

import dataclasses
import os
import typing as t

PLACEHOLDER_API_KEY = "your-api-key-here"
MISSING_KEY_MESSAGE = "Please set your Gemini API key in the .env file"

DEFAULT_MODEL = "gemini-flash-lite-latest"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


def _float_env(env: t.Mapping[str, str], key: str, default: float) -> float:
    raw = str(env.get(key) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _int_env(env: t.Mapping[str, str], key: str, default: int) -> int:
    raw = str(env.get(key) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclasses.dataclass(frozen=True)
class QuestConfig:
    """Settings read once at process start and handed to the Gemini client."""

    gemini_api_key: str | None = None
    gemini_model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    timeout_s: float | None = 60.0
    temperature: float = 0.9
    max_output_tokens: int = 8192
    max_sessions: int = 500

    @staticmethod
    def from_env(env: t.Mapping[str, str] | None = None) -> "QuestConfig":
        env = os.environ if env is None else env
        api_key = env.get("GEMINI_API_KEY") or env.get("GOOGLE_API_KEY") or None
        timeout_s: float | None = _float_env(env, "GEMINI_TIMEOUT_S", 60.0)
        if timeout_s is not None and timeout_s <= 0:
            timeout_s = None
        return QuestConfig(
            gemini_api_key=api_key.strip() if api_key else None,
            gemini_model=(env.get("GEMINI_MODEL") or DEFAULT_MODEL).strip(),
            base_url=(env.get("GEMINI_BASE_URL") or DEFAULT_BASE_URL).rstrip("/"),
            timeout_s=timeout_s,
            temperature=_float_env(env, "QUEST_TEMPERATURE", 0.9),
            max_output_tokens=_int_env(env, "QUEST_MAX_OUTPUT_TOKENS", 8192),
            max_sessions=_int_env(env, "QUEST_MAX_SESSIONS", 500),
        )

    def credential_error(self) -> str | None:
        if not self.gemini_api_key or self.gemini_api_key == PLACEHOLDER_API_KEY:
            return MISSING_KEY_MESSAGE
        return None

    def redacted(self) -> dict[str, t.Any]:
        out = dataclasses.asdict(self)
        out["gemini_api_key"] = "set" if self.gemini_api_key else None
        return out
