from __future__ import annotations

import json
import os
import threading
import time
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Optional

_lock = threading.Lock()

_FILE_PREFIX = "chatrelay"


def _backend_dir() -> Path:
    # backend/chatrelay/logging/ndjson.py -> backend/
    return Path(__file__).resolve().parents[2]


def log_dir() -> Path:
    p = os.environ.get("CHATRELAY_LOG_DIR")
    if p:
        return Path(p)
    return _backend_dir() / "data" / "logs"


def _today_prefix(ts: Optional[float] = None) -> str:
    dt = datetime.fromtimestamp(ts or time.time())
    return dt.strftime(f"{_FILE_PREFIX}-%Y-%m-%d")


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, default))
    except ValueError:
        return default


def _max_bytes() -> int:
    return _env_int("CHATRELAY_LOG_MAX_BYTES", 50 * 1024 * 1024)


def _retention_days() -> int:
    return _env_int("CHATRELAY_LOG_RETENTION_DAYS", 7)


_MAX_ITEMS = 80


def _truncate(v: Any, *, max_len: int = 600) -> Any:
    """Clip long strings and large containers so one record stays small."""
    if v is None or isinstance(v, (bool, int, float)):
        return v
    if isinstance(v, dict):
        clipped: dict[str, Any] = {str(k): _truncate(vv, max_len=max_len) for k, vv in list(v.items())[:_MAX_ITEMS]}
        if len(v) > _MAX_ITEMS:
            clipped["_truncated_keys"] = len(v) - _MAX_ITEMS
        return clipped
    if isinstance(v, (list, tuple)):
        items = [_truncate(x, max_len=max_len) for x in list(v)[:_MAX_ITEMS]]
        if len(v) > _MAX_ITEMS:
            items.append({"_truncated_items": len(v) - _MAX_ITEMS})
        return items
    s = v if isinstance(v, str) else str(v)
    if len(s) > max_len:
        return f"{s[:max_len]}...(+{len(s) - max_len} chars)"
    return s


def _has_room(p: Path, limit: int) -> bool:
    try:
        return not p.exists() or p.stat().st_size < limit
    except OSError:
        return True


def _pick_log_file(*, ts: Optional[float] = None) -> Path:
    """Today's file, or the first numbered overflow file still under the size limit."""
    d = log_dir()
    d.mkdir(parents=True, exist_ok=True)
    day = _today_prefix(ts)
    limit = _max_bytes()
    candidates = [d / f"{day}.ndjson"] + [d / f"{day}.{i}.ndjson" for i in range(1, 1000)]
    for p in candidates:
        if _has_room(p, limit):
            return p
    return candidates[0]


def _file_order(p: Path) -> tuple[str, int]:
    # chatrelay-2024-01-31.ndjson, then chatrelay-2024-01-31.1.ndjson, ...
    day, _, suffix = p.name[: -len(".ndjson")].partition(".")
    return day, int(suffix) if suffix.isdigit() else 0


def log_files() -> list[Path]:
    """Current log files, newest first."""
    d = log_dir()
    if not d.exists():
        return []
    return sorted(d.glob(f"{_FILE_PREFIX}-*.ndjson"), key=_file_order, reverse=True)


def _prune_old_files() -> None:
    cutoff = datetime.now() - timedelta(days=_retention_days())
    for p in log_files():
        try:
            mtime = datetime.fromtimestamp(p.stat().st_mtime)
            if mtime < cutoff:
                p.unlink(missing_ok=True)
        except OSError:
            continue


def init_logging() -> None:
    """
    Best-effort init: ensure log dir exists and prune old files.
    """
    with _lock:
        log_dir().mkdir(parents=True, exist_ok=True)
        _prune_old_files()


def log_event(
    *,
    level: str,
    event: str,
    data: Optional[dict[str, Any]] = None,
    connectionId: Optional[str] = None,
) -> None:
    """
    Append a single structured NDJSON record.
    Callers pass sizes/previews of chat content, not the full text.
    """
    ts_ms = int(time.time() * 1000)
    rec: dict[str, Any] = {
        "ts": ts_ms,
        "level": level,
        "event": event,
    }
    if connectionId:
        rec["connectionId"] = connectionId
    if data:
        rec["data"] = _truncate(data)

    line = json.dumps(rec, ensure_ascii=False)
    with _lock:
        try:
            _prune_old_files()
            p = _pick_log_file()
            with open(p, "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except Exception:
            # Best-effort: never crash the relay due to logging.
            pass
