# gz_sieve/jsonio.py
from __future__ import annotations
import json, logging, sys
from typing import Any, Dict, Optional

from .models.outcome import RunTotals

COMMAND = "sieve"

def enable_json_logging():
    """Send logs to stderr and keep only errors while JSON goes to stdout."""
    for h in logging.root.handlers[:]:
        logging.root.removeHandler(h)
        h.close()
    logging.basicConfig(stream=sys.stderr, level=logging.ERROR)

def _emit(payload: Dict[str, Any]) -> None:
    print(json.dumps(payload, ensure_ascii=False), file=sys.stdout)
    sys.stdout.flush()

def report_totals(totals: RunTotals, meta: Optional[Dict[str, Any]] = None, code: int = 0) -> int:
    payload: Dict[str, Any] = {"result": "success", "command": COMMAND, "data": totals.to_dict()}
    if meta:
        payload["meta"] = meta
    _emit(payload)
    return code

def error(message: str, kind: Optional[str] = None,
          debug: Optional[Dict[str, Any]] = None, code: int = 1) -> int:
    payload: Dict[str, Any] = {"result": "error", "command": COMMAND, "error": message}
    if kind:
        payload["kind"] = kind
    if debug:
        payload["debug"] = debug
    _emit(payload)
    return code
