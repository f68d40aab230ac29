from __future__ import annotations

import argparse

import uvicorn

from chatrelay import config


def main() -> int:
    config.load_dotenvs()
    ap = argparse.ArgumentParser(description="Run the chat relay server.")
    ap.add_argument("--host", default=config.host(), help="Interface to bind (default: CHATRELAY_HOST or 127.0.0.1).")
    ap.add_argument("--port", type=int, default=config.port(), help="Port to bind (default: CHATRELAY_PORT or 8000).")
    ap.add_argument("--reload", action="store_true", help="Restart on code changes (development only).")
    args = ap.parse_args()

    uvicorn.run("chatrelay.main:app", host=args.host, port=args.port, reload=args.reload)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
