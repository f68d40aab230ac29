from __future__ import annotations

from pathlib import Path
from typing import Any

from fastapi import APIRouter, Query

from chatrelay.logging.ndjson import log_dir, log_files

router = APIRouter()


def _read_tail_lines(path: Path, *, max_lines: int) -> list[str]:
    """
    Best-effort tail. Reads a chunk from the end and splits lines.
    """
    if not path.exists():
        return []
    try:
        size = path.stat().st_size
        # Read up to last 512KB per file.
        read_bytes = min(size, 512 * 1024)
        with open(path, "rb") as f:
            f.seek(max(0, size - read_bytes))
            buf = f.read(read_bytes)
    except OSError:
        return []
    text = buf.decode("utf-8", errors="ignore")
    lines = [ln for ln in text.splitlines() if ln.strip()]
    return lines[-max_lines:]


@router.get("/api/logs/tail")
def get_logs_tail(lines: int = Query(200, ge=1, le=2000)) -> dict[str, Any]:
    out_lines: list[str] = []
    for p in log_files():
        remaining = lines - len(out_lines)
        if remaining <= 0:
            break
        # prepend older chunks so ordering is chronological overall
        out_lines = _read_tail_lines(p, max_lines=remaining) + out_lines
    tail = out_lines[-lines:]
    return {"dir": str(log_dir()), "lines": tail, "count": len(tail)}
