from __future__ import annotations

import os
from pathlib import Path


def load_dotenvs() -> None:
    """
    Load environment variables from:
    - backend/.env
    - repo-root/.env
    """
    from dotenv import load_dotenv

    backend_dir = Path(__file__).resolve().parents[1]
    repo_root = backend_dir.parent

    load_dotenv(backend_dir / ".env")
    load_dotenv(repo_root / ".env")


def cors_origins() -> list[str]:
    raw = os.environ.get("CHATRELAY_CORS_ORIGINS", "http://localhost:5173")
    return [o.strip() for o in raw.split(",") if o.strip()]


def host() -> str:
    return os.environ.get("CHATRELAY_HOST", "127.0.0.1").strip() or "127.0.0.1"


def port() -> int:
    try:
        return int(os.environ.get("CHATRELAY_PORT", "8000"))
    except ValueError:
        return 8000
