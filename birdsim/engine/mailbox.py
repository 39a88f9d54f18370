"""Request mailbox connecting callers to the coordinator thread."""

from __future__ import annotations

import queue
from concurrent.futures import Future
from dataclasses import dataclass, field
from enum import Enum, unique
from typing import Any


@unique
class Operation(str, Enum):
    """Everything a caller can ask the coordinator to do."""

    START = "start"
    STOP = "stop"
    RESTART = "restart"
    ADVANCE = "advance"
    GET_STATE = "get-state"
    GET_CONFIG = "get-config"
    SET_CONFIG = "set-config"
    GET_TIME_STEP = "get-time-step"
    SET_TIME_STEP = "set-time-step"
    GET_ENVIRONMENT = "get-environmental-factors"
    SET_ENVIRONMENT = "set-environmental-factors"
    GET_ZONES = "get-zones"
    SET_ZONES = "set-zones"
    SAVE_SNAPSHOT = "save-snapshot"
    LOAD_SNAPSHOT = "load-snapshot"
    SHUTDOWN = "shutdown"


@dataclass(slots=True)
class Request:
    """One message. The caller blocks on ``reply`` until the worker answers."""

    op: Operation
    payload: Any = None
    reply: Future = field(default_factory=Future)


class Mailbox:
    """MPSC (multiple-producer, single-consumer) FIFO of Requests.

    Any thread may post; only the coordinator thread takes. Requests are
    delivered in the order they were posted.
    """

    __slots__ = ("_queue",)

    def __init__(self) -> None:
        self._queue: queue.Queue[Request] = queue.Queue()

    def post(self, request: Request) -> None:
        """Thread-safe enqueue."""
        self._queue.put_nowait(request)

    def take(self, timeout: float | None) -> Request | None:
        """Next request, or None if *timeout* seconds pass first."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def fail_pending(self, exc: BaseException) -> int:
        """Reject every queued request with *exc*. Returns how many were rejected."""
        rejected = 0
        while True:
            try:
                request = self._queue.get_nowait()
            except queue.Empty:
                break
            if request.reply.set_running_or_notify_cancel():
                request.reply.set_exception(exc)
            rejected += 1
        return rejected
