"""Server-sent event frame decoding for streamed completions.

The gateway streams ``data: {...}`` lines terminated by ``data: [DONE]``.
Comment lines (``: OPENROUTER PROCESSING``) and blank separators carry no
payload and are ignored.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"


@dataclass
class StreamFrame:
    """One decoded stream event.

    Attributes:
        done: True for the terminating ``[DONE]`` event
        delta: Text content carried by the frame (may be empty)
        model: Model id echoed in the frame, if any
        error: In-band error payload, if the frame carries one
    """

    done: bool = False
    delta: str = ""
    model: Optional[str] = None
    error: Optional[Any] = None


def parse_sse_line(line: str) -> Optional[StreamFrame]:
    """Decode one line of the event stream.

    Returns None for lines without a payload and for data lines whose JSON
    does not parse; malformed frames are skipped, not fatal.
    """
    line = line.strip()
    if not line.startswith(DATA_PREFIX):
        return None

    data = line[len(DATA_PREFIX):].strip()
    if data == DONE_SENTINEL:
        return StreamFrame(done=True)

    try:
        payload = json.loads(data)
    except json.JSONDecodeError:
        logger.debug("Skipping malformed stream frame: %.80s", data)
        return None
    if not isinstance(payload, dict):
        return None

    if payload.get("error"):
        return StreamFrame(error=payload["error"], model=payload.get("model"))

    delta = ""
    choices = payload.get("choices") or []
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        frame_delta = choices[0].get("delta")
        if isinstance(frame_delta, dict):
            delta = frame_delta.get("content") or ""

    return StreamFrame(delta=delta, model=payload.get("model"))
