import logging
import os
import sys

import bson
from bson import ObjectId
from flask import Flask, jsonify, request

from set_env_vars import initialize_env_vars
from quest.config import QuestConfig
from quest.errors import (
    AuthenticationError,
    ConfigurationError,
    DocumentParseError,
    QuestError,
    ResponseFormatError,
    SessionStateError,
    TransientError,
)
from quest.file_utils import FileUtils
from quest.prompts import build_context
from quest.quest_ai import GeminiClient
from quest.session import SessionStore
from quest.styles import DEFAULT_STYLE, list_styles


def _configure_logging() -> logging.Logger:
    level = os.environ.get("QUEST_LOG_LEVEL", "INFO").upper()
    root = logging.getLogger()
    if not root.handlers:
        sh = logging.StreamHandler(sys.stdout)
        sh.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        root.addHandler(sh)
    root.setLevel(level)
    return logging.getLogger("quest.server")


initialize_env_vars()
logger = _configure_logging()

server = Flask(__name__, static_folder="frontend/dist", static_url_path="")

config = QuestConfig.from_env()
file_utils = FileUtils()
store = SessionStore(lambda: GeminiClient(config), max_sessions=config.max_sessions)

logger.info("Config: %s", config.redacted())
if config.credential_error():
    logger.warning("Gemini API key is not configured; sessions cannot start until it is set.")

ERROR_STATUS = {
    ConfigurationError: 500,
    DocumentParseError: 400,
    AuthenticationError: 401,
    ResponseFormatError: 502,
    TransientError: 502,
    SessionStateError: 409,
}


def _error_response(e: QuestError):
    status = ERROR_STATUS.get(type(e), 500)
    return jsonify({"error": e.user_message}), status


def _payload() -> dict:
    if request.is_json:
        return request.get_json(silent=True) or {}
    return request.form.to_dict()


def _lookup_session(sessionID):
    try:
        ObjectId(sessionID)
    except bson.errors.InvalidId:
        return None, (jsonify({"error": "Invalid sessionID"}), 400)

    session = store.get(sessionID)
    if session is None:
        return None, (jsonify({"error": "Session not found"}), 404)
    return session, None


def _uploaded_pdf_text():
    file_storage = request.files.get("file")
    if not file_storage or not file_storage.filename:
        return None
    if not file_utils.looks_like_pdf(file_storage.filename, file_storage.mimetype):
        raise DocumentParseError("Only PDF files are supported.")
    return file_utils.extract_text_from_pdf_bytes(file_storage.read())


@server.route("/api/hello")
def hello():
    return jsonify({"message": "API Working!"})


@server.route("/api/configStatus", methods=["GET"])
def config_status():
    message = config.credential_error()
    return jsonify({"ok": message is None, "error": message})


@server.route("/api/getStyles", methods=["GET"])
def get_styles():
    return jsonify([s.to_dict() for s in list_styles()])


@server.route("/api/extractPdf", methods=["POST"])
def extract_pdf():
    if "file" not in request.files:
        return jsonify({"error": "No file provided"}), 400
    try:
        text = _uploaded_pdf_text()
    except DocumentParseError as e:
        return _error_response(e)
    if text is None:
        return jsonify({"error": "No file provided"}), 400
    return jsonify({"text": text})


@server.route("/api/startSession", methods=["POST"])
def start_session():
    payload = _payload()
    style = payload.get("style") or DEFAULT_STYLE
    notes = payload.get("notes") or ""

    try:
        pdf_text = _uploaded_pdf_text()
    except DocumentParseError as e:
        return _error_response(e)
    if pdf_text is None:
        pdf_text = payload.get("pdfText") or ""

    try:
        context = build_context(pdf_text, notes)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    session = store.create()
    try:
        session.start(context, style)
    except QuestError as e:
        store.delete(session.session_id)
        return _error_response(e)
    except ValueError as e:
        store.delete(session.session_id)
        return jsonify({"error": str(e)}), 400

    return jsonify(session.to_dict())


@server.route("/api/submitAnswer/<sessionID>", methods=["POST"])
def submit_answer(sessionID):
    session, error = _lookup_session(sessionID)
    if error:
        return error

    answer = _payload().get("answer")
    if not answer or not str(answer).strip():
        return jsonify({"error": "No answer provided"}), 400

    try:
        session.submit_answer(str(answer))
    except QuestError as e:
        return _error_response(e)

    return jsonify(session.to_dict())


@server.route("/api/getSession/<sessionID>", methods=["GET"])
def get_session(sessionID):
    session, error = _lookup_session(sessionID)
    if error:
        return error
    return jsonify(session.to_dict())


@server.route("/api/deleteSession/<sessionID>", methods=["DELETE"])
def delete_session(sessionID):
    session, error = _lookup_session(sessionID)
    if error:
        return error
    store.delete(session.session_id)
    return jsonify({"deleted": True})


@server.route("/", defaults={"path": ""})
@server.route("/<path:path>")
def spa(path):
    if path.startswith("api"):
        return jsonify({"error": "API route not found"}), 404

    return server.send_static_file("index.html")


if __name__ == '__main__':
    server.run(port=int(os.environ.get("PORT", 8080)))
