"""Cooperative cancellation signal.

One AbortSignal is shared by everyone taking part in a single streaming
operation: the sink's cancel listener fires it, the completion client's
read loop polls it between chunks. Work stops at the next chunk
boundary; already-delivered chunks are never retracted.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)

AbortListener = Callable[[Optional[str]], None]


class AbortSignal:
    """A one-shot abort flag with listeners.

    Example:
        signal = AbortSignal()
        signal.add_listener(lambda reason: print("aborted:", reason))
        signal.abort("user pressed Escape")
        assert signal.aborted
    """

    def __init__(self) -> None:
        self._aborted = False
        self._reason: Optional[str] = None
        self._listeners: list[AbortListener] = []

    @property
    def aborted(self) -> bool:
        return self._aborted

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def abort(self, reason: Optional[str] = None) -> None:
        """Fire the signal. Subsequent calls are no-ops."""
        if self._aborted:
            return
        self._aborted = True
        self._reason = reason
        logger.debug("Abort signalled: %s", reason or "no reason given")
        for listener in list(self._listeners):
            listener(reason)

    def add_listener(self, listener: AbortListener) -> None:
        """Register ``listener``; it is called immediately if already aborted."""
        if self._aborted:
            listener(self._reason)
            return
        self._listeners.append(listener)

    def remove_listener(self, listener: AbortListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)
