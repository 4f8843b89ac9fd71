"""
Learning session state machine.

A session starts ``idle``, becomes ``active`` after a successful opening
turn, and stays active until the learner resets it. Each turn composes a
prompt, calls Gemini, parses the reply, and only then commits the new state,
so a turn that fails at any stage leaves the session exactly as it was.
"""
from __future__ import annotations

import collections
import logging
import threading
import typing as t

from bson import ObjectId

from quest.errors import QuestError, SessionStateError
from quest.prompts import compose_prompt
from quest.quest_ai import Badge, GeminiClient, ModelResponse, parse_model_response, strip_examples_block
from quest.styles import DEFAULT_STYLE, StyleDescriptor, get_style

logger = logging.getLogger(__name__)

JsonDict = dict[str, t.Any]


class LearningSession:
    def __init__(self, gateway: GeminiClient, *, session_id: str | None = None) -> None:
        self.gateway = gateway
        self.session_id = session_id or str(ObjectId())
        self._turn_lock = threading.Lock()
        self._clear()

    def _clear(self) -> None:
        self.is_active = False
        self.current_scene = ""
        self.current_examples: list[str] = []
        self.history: list[str] = []
        self.context = ""
        self.style: StyleDescriptor = get_style(DEFAULT_STYLE)
        self.badges: list[Badge] = []

    @property
    def state(self) -> str:
        return "active" if self.is_active else "idle"

    @property
    def display_scene(self) -> str:
        return strip_examples_block(self.current_scene).strip()

    def _run_turn(self, prompt: str) -> ModelResponse:
        raw = self.gateway.generate(prompt)
        return parse_model_response(raw)

    def _acquire_turn(self) -> None:
        if not self._turn_lock.acquire(blocking=False):
            raise SessionStateError("A turn is already in progress.")

    def start(self, context: str, style: str | StyleDescriptor) -> ModelResponse:
        self._acquire_turn()
        try:
            if self.is_active:
                raise SessionStateError("This session has already started.")
            descriptor = get_style(style)
            logger.info("Session %s: starting (style=%s, context_chars=%d)", self.session_id, descriptor.id, len(context))
            try:
                response = self._run_turn(compose_prompt(context, [], descriptor))
            except QuestError as e:
                logger.warning("Session %s: start failed (%s)", self.session_id, type(e).__name__)
                raise

            self.context = context
            self.style = descriptor
            self.history = []
            self.badges = []
            self.current_scene = response.scene
            self.current_examples = list(response.examples)
            self.is_active = True
            logger.info("Session %s: active", self.session_id)
            return response
        finally:
            self._turn_lock.release()

    def submit_answer(self, answer: str) -> ModelResponse:
        self._acquire_turn()
        try:
            if not self.is_active:
                raise SessionStateError("Start a session before submitting answers.")
            answer = (answer or "").strip()
            if not answer:
                raise ValueError("No answer provided")

            logger.info("Session %s: evaluating answer %d", self.session_id, len(self.history) + 1)
            # Previous answers exclude this one; it is sent separately for grading.
            try:
                response = self._run_turn(compose_prompt(self.context, self.history, self.style, answer))
            except QuestError as e:
                logger.warning("Session %s: answer rejected (%s)", self.session_id, type(e).__name__)
                raise

            self.history = [*self.history, answer]
            self.current_scene = response.scene
            self.current_examples = list(response.examples)
            if response.badge is not None:
                self.badges = [*self.badges, response.badge]
                logger.info("Session %s: awarded %s medal", self.session_id, response.badge.tier)
            return response
        finally:
            self._turn_lock.release()

    def reset(self) -> None:
        self._acquire_turn()
        try:
            self._clear()
        finally:
            self._turn_lock.release()

    def to_dict(self) -> JsonDict:
        return {
            "sessionID": self.session_id,
            "isActive": self.is_active,
            "style": self.style.id,
            "scene": self.display_scene,
            "examples": list(self.current_examples),
            "history": list(self.history),
            "badges": [b.to_dict() for b in self.badges],
        }


class SessionStore:
    """In-memory registry of sessions keyed by id.

    Holds at most ``max_sessions``; creating one more evicts the session
    that was least recently created or looked up.
    """

    def __init__(self, gateway_factory: t.Callable[[], GeminiClient], *, max_sessions: int = 500) -> None:
        self._gateway_factory = gateway_factory
        self._max_sessions = max(1, int(max_sessions))
        self._sessions: collections.OrderedDict[str, LearningSession] = collections.OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def create(self) -> LearningSession:
        session = LearningSession(self._gateway_factory())
        with self._lock:
            self._sessions[session.session_id] = session
            while len(self._sessions) > self._max_sessions:
                evicted_id, _ = self._sessions.popitem(last=False)
                logger.info("Session %s: evicted from store", evicted_id)
        return session

    def get(self, session_id: str) -> LearningSession | None:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                self._sessions.move_to_end(session_id)
            return session

    def delete(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None
