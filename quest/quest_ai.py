from __future__ import annotations

import dataclasses
import datetime as dt
import http.client
import json
import logging
import re
import typing as t
import urllib.error
import urllib.parse
import urllib.request

from quest.config import QuestConfig
from quest.errors import (
    AuthenticationError,
    ConfigurationError,
    ResponseFormatError,
    TransientError,
)
from quest.prompts import EXAMPLES_END, EXAMPLES_START

logger = logging.getLogger(__name__)

JsonDict = dict[str, t.Any]
BadgeTier = t.Literal["bronze", "silver", "gold"]

BADGE_TIERS: tuple[str, ...] = ("bronze", "silver", "gold")

_EXAMPLES_BLOCK_RE = re.compile(re.escape(EXAMPLES_START) + r"\n([\s\S]*?)\n" + re.escape(EXAMPLES_END))
_EXAMPLES_STRIP_RE = re.compile(re.escape(EXAMPLES_START) + r"[\s\S]*?" + re.escape(EXAMPLES_END))

_INVALID_KEY_MARKERS = ("API key not valid", "API_KEY_INVALID")


@dataclasses.dataclass(frozen=True)
class Badge:
    tier: BadgeTier
    message: str
    awarded_at: dt.datetime

    @property
    def timestamp_ms(self) -> int:
        return int(self.awarded_at.timestamp() * 1000)

    def to_dict(self) -> JsonDict:
        return {
            "type": self.tier,
            "message": self.message,
            "timestamp": self.timestamp_ms,
            "awarded_at_iso": self.awarded_at.isoformat(),
        }

    @staticmethod
    def from_dict(data: JsonDict) -> "Badge":
        tier = str(data.get("type") or "").strip().lower()
        if tier not in BADGE_TIERS:
            raise ValueError(f"Unknown medal type: {data.get('type')!r}")
        return Badge(
            tier=t.cast(BadgeTier, tier),
            message=str(data.get("message") or "").strip(),
            awarded_at=_awarded_at(data.get("timestamp")),
        )


@dataclasses.dataclass(frozen=True)
class ModelResponse:
    scene: str
    examples: list[str]
    badge: Badge | None = None

    @property
    def display_scene(self) -> str:
        return strip_examples_block(self.scene).strip()


def _awarded_at(value: t.Any) -> dt.datetime:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return dt.datetime.fromtimestamp(float(value) / 1000.0, tz=dt.timezone.utc)
        except (OverflowError, OSError, ValueError):
            pass
    return dt.datetime.now(dt.timezone.utc)


def extract_examples(scene: str) -> list[str]:
    m = _EXAMPLES_BLOCK_RE.search(scene or "")
    if not m:
        return []
    return [ln.strip() for ln in m.group(1).split("\n") if ln.strip()]


def strip_examples_block(scene: str) -> str:
    return _EXAMPLES_STRIP_RE.sub("", scene or "")


def _outer_brace_span(text: str) -> str | None:
    # Greedy: first "{" through last "}". Braces in surrounding prose can
    # widen the span past the real object.
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]


def _load_reply_json(raw: str) -> JsonDict | None:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        data = None
    if isinstance(data, dict):
        return t.cast(JsonDict, data)

    candidate = _outer_brace_span(raw)
    if candidate is None:
        return None
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError:
        return None
    return t.cast(JsonDict, data) if isinstance(data, dict) else None


def _coerce_examples(value: t.Any, scene: str) -> list[str]:
    if isinstance(value, list):
        return [str(e).strip() for e in value if e is not None and str(e).strip()]
    return extract_examples(scene)


def _coerce_badge(value: t.Any) -> Badge | None:
    if value is None:
        return None
    if not isinstance(value, dict):
        logger.warning("Ignoring medal that is not an object: %r", value)
        return None
    try:
        return Badge.from_dict(t.cast(JsonDict, value))
    except ValueError as e:
        logger.warning("Ignoring malformed medal: %s", e)
        return None


def parse_model_response(raw: str) -> ModelResponse:
    """Turn Gemini's reply into a :class:`ModelResponse`.

    The whole reply is parsed as JSON first. If that fails, the text between
    the first ``{`` and the last ``}`` is tried instead, which recovers replies
    wrapped in prose or code fences.
    """
    data = _load_reply_json(raw or "")
    if data is None or not isinstance(data.get("scene"), str):
        logger.warning("Unparseable model reply (%d chars)", len(raw or ""))
        raise ResponseFormatError()

    scene = t.cast(str, data["scene"])
    return ModelResponse(
        scene=scene,
        examples=_coerce_examples(data.get("examples"), scene),
        badge=_coerce_badge(data.get("medal")),
    )


class GeminiClient:
    def __init__(self, config: QuestConfig | None = None) -> None:
        self.config = config or QuestConfig()

    def validate_credentials(self) -> None:
        message = self.config.credential_error()
        if message:
            raise ConfigurationError(message)

    def _endpoint(self) -> str:
        return (
            f"{self.config.base_url}/models/{urllib.parse.quote(self.config.gemini_model)}:generateContent"
            f"?key={urllib.parse.quote(t.cast(str, self.config.gemini_api_key))}"
        )

    def _payload(self, prompt: str) -> JsonDict:
        return {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.config.temperature,
                "maxOutputTokens": self.config.max_output_tokens,
                "responseMimeType": "application/json",
            },
        }

    def _raise_for_http_error(self, e: urllib.error.HTTPError) -> t.NoReturn:
        body = ""
        try:
            body = e.read().decode("utf-8", errors="replace")
        except Exception:
            body = ""
        if e.code in (401, 403) or any(marker in body for marker in _INVALID_KEY_MARKERS):
            logger.warning("Gemini rejected the API key (HTTP %d)", e.code)
            raise AuthenticationError() from e
        logger.error("Gemini HTTPError %d: %s", e.code, body[:500])
        raise TransientError(f"Gemini request failed (HTTP {e.code}). Please try again.") from e

    def _text_from_body(self, raw: str) -> str:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise TransientError("Gemini returned an unreadable response. Please try again.") from e
        if not isinstance(data, dict):
            raise TransientError("Gemini returned an unreadable response. Please try again.")

        candidates = data.get("candidates") or []
        if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
            raise TransientError("Gemini returned no candidates. Please try again.")

        candidate = t.cast(JsonDict, candidates[0])
        content = candidate.get("content")
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            parts = []
        text_parts = [p.get("text") for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str) and p.get("text")]
        if not text_parts:
            finish_reason = candidate.get("finishReason")
            raise TransientError(f"Gemini returned no text (finish reason: {finish_reason}). Please try again.")
        return "".join(t.cast(list[str], text_parts))

    def generate(self, prompt: str) -> str:
        """Send one prompt and return the model's text reply unmodified."""
        self.validate_credentials()

        req = urllib.request.Request(
            self._endpoint(),
            data=json.dumps(self._payload(prompt), ensure_ascii=False).encode("utf-8"),
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        logger.info("Gemini request: model=%s prompt_chars=%d", self.config.gemini_model, len(prompt))

        try:
            if self.config.timeout_s is None:
                resp_cm = urllib.request.urlopen(req)
            else:
                resp_cm = urllib.request.urlopen(req, timeout=self.config.timeout_s)
            with resp_cm as resp:
                raw = resp.read().decode("utf-8")
        except urllib.error.HTTPError as e:
            self._raise_for_http_error(e)
        except (urllib.error.URLError, http.client.HTTPException, TimeoutError, OSError) as e:
            logger.error("Gemini request failed: %s", e)
            raise TransientError() from e
        except UnicodeDecodeError as e:
            logger.error("Gemini reply was not valid UTF-8: %s", e)
            raise TransientError("Gemini returned an unreadable response. Please try again.") from e

        text = self._text_from_body(raw)
        logger.info("Gemini reply: %d chars", len(text))
        return text


__all__ = [
    "BADGE_TIERS",
    "Badge",
    "GeminiClient",
    "ModelResponse",
    "extract_examples",
    "parse_model_response",
    "strip_examples_block",
]
