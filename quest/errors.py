"""
Error types shared by the ingestor, the Gemini gateway, the response parser
and the session state machine.

Every error carries a ``user_message`` that the HTTP routes and the terminal
loop show to the learner as-is.
"""
from __future__ import annotations


class QuestError(Exception):
    default_message = "An error occurred. Please try again."

    def __init__(self, user_message: str | None = None) -> None:
        self.user_message = user_message or self.default_message
        super().__init__(self.user_message)


class ConfigurationError(QuestError):
    """Raised when the Gemini credential is missing or still the placeholder."""

    default_message = "Please set your Gemini API key in the .env file"


class DocumentParseError(QuestError):
    """Raised when an uploaded document cannot be read as a PDF."""

    default_message = "Error processing PDF file. Please try again."


class AuthenticationError(QuestError):
    """Raised when Gemini rejects the configured credential."""

    default_message = (
        "Invalid Gemini API key. Please check your .env file and ensure you have set a valid API key."
    )


class ResponseFormatError(QuestError):
    """Raised when the model reply cannot be turned into a scene."""

    default_message = "Failed to parse response. Please try again."


class TransientError(QuestError):
    """Raised for any other network or service failure."""

    default_message = "An error occurred while contacting Gemini. Please try again."


class SessionStateError(QuestError):
    default_message = "That action is not available right now."


__all__ = [
    "QuestError",
    "ConfigurationError",
    "DocumentParseError",
    "AuthenticationError",
    "ResponseFormatError",
    "TransientError",
    "SessionStateError",
]
