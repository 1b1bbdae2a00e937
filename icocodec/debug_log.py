"""
Debug logging switches for the ICO codec.
Messages go to stdout when DEBUG_CODEC is on, and to LOG_SINK whenever one is set.
"""

import json
from typing import Any, Callable, Optional

DEBUG_CODEC = False                 # set True to print decode/encode traces
LOG_TRUNCATE: Optional[int] = 4000  # cap per message, or None for full
LOG_SINK: Optional[Callable[[str, str], None]] = None


def _dbg(label: str, text: Any):
    if not DEBUG_CODEC and LOG_SINK is None:
        return
    try:
        if isinstance(text, (dict, list)):
            s = json.dumps(text, indent=2, ensure_ascii=False)
        else:
            s = "" if text is None else str(text)
    except Exception:
        s = str(text)
    if LOG_TRUNCATE and len(s) > LOG_TRUNCATE:
        s = s[:LOG_TRUNCATE] + f"\n...[truncated {len(s) - LOG_TRUNCATE} chars]"
    if LOG_SINK:
        try:
            LOG_SINK(label, s)
        except Exception:
            pass
    if DEBUG_CODEC:
        print(f"\n===== {label} =====\n{s}\n", flush=True)


def set_log_sink(callback: Optional[Callable[[str, str], None]]):
    global LOG_SINK
    LOG_SINK = callback


def set_debug(enabled: bool):
    global DEBUG_CODEC
    DEBUG_CODEC = bool(enabled)
