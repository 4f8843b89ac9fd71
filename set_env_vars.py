"""Simple .env loader.

Usage:
  - From Python: `from set_env_vars import initialize_env_vars; initialize_env_vars()`
  - From the shell: `python set_env_vars.py --env-file .env` prints which keys are set.

Existing environment variables win unless `override_existing` is set.
"""
from __future__ import annotations

import argparse
import json
import os
import pathlib

KNOWN_KEYS = (
    "GEMINI_API_KEY",
    "GOOGLE_API_KEY",
    "GEMINI_MODEL",
    "GEMINI_BASE_URL",
    "GEMINI_TIMEOUT_S",
    "QUEST_TEMPERATURE",
    "QUEST_MAX_OUTPUT_TOKENS",
    "QUEST_MAX_SESSIONS",
    "QUEST_LOG_LEVEL",
)


def _parse_dotenv(content: str) -> dict[str, str]:
    out: dict[str, str] = {}
    for raw in content.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        if "=" not in line:
            continue
        k, v = line.split("=", 1)
        key = k.strip()
        val = v.strip()
        if not key:
            continue
        if len(val) >= 2 and ((val[0] == val[-1] == '"') or (val[0] == val[-1] == "'")):
            val = val[1:-1]
        out[key] = val
    return out


def _load_dotenv_file(path: pathlib.Path) -> dict[str, str]:
    try:
        content = path.read_text(encoding="utf-8")
    except (FileNotFoundError, IsADirectoryError):
        return {}
    return _parse_dotenv(content)


def _resolve_repo_root() -> pathlib.Path:
    return pathlib.Path(__file__).resolve().parent


def _coalesce_env(primary: str, aliases: list[str]) -> str | None:
    v = os.environ.get(primary)
    if v:
        return v
    for a in aliases:
        v2 = os.environ.get(a)
        if v2:
            return v2
    return None


def initialize_env_vars(
    *,
    gemini_api_key: str | None = None,
    dotenv_paths: list[str] | None = None,
    override_existing: bool = False,
) -> dict[str, bool]:
    repo_root = _resolve_repo_root()
    candidates = [
        repo_root / ".env",
        repo_root / ".env.local",
    ]
    # Later files win: .env, then .env.local, then explicit paths.
    if dotenv_paths:
        candidates = candidates + [pathlib.Path(p).expanduser().resolve() for p in dotenv_paths]

    loaded: dict[str, str] = {}
    for p in candidates:
        loaded.update(_load_dotenv_file(p))

    def set_env(k: str, v: str | None) -> None:
        if v is None or v == "":
            return
        if not override_existing and os.environ.get(k):
            return
        os.environ[k] = v

    if gemini_api_key:
        set_env("GEMINI_API_KEY", gemini_api_key)

    for k, v in loaded.items():
        if k in KNOWN_KEYS:
            set_env(k, v)

    g = _coalesce_env("GEMINI_API_KEY", ["GOOGLE_API_KEY"])
    if g:
        set_env("GEMINI_API_KEY", g)

    return {
        "gemini_api_key_set": bool(_coalesce_env("GEMINI_API_KEY", ["GOOGLE_API_KEY"])),
        "gemini_model_set": bool(os.environ.get("GEMINI_MODEL")),
    }


def _main() -> None:
    parser = argparse.ArgumentParser(description="Load .env files and report which settings are present.")
    parser.add_argument("--env-file", "-e", action="append", default=None, help="Extra .env file; overrides the repo .env files")
    parser.add_argument("--override", action="store_true", help="Override existing env vars")
    args = parser.parse_args()

    status = initialize_env_vars(dotenv_paths=args.env_file, override_existing=args.override)
    print(json.dumps(status, indent=2))


if __name__ == "__main__":
    _main()
