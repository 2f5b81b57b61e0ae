from __future__ import annotations

import argparse
import signal
import threading
from contextlib import contextmanager
from typing import Iterator

from ..db.dynamodb.admin import TableManager
from ..db.dynamodb.client import dynamodb_client
from ..settings import Settings


def positive_float(value: str) -> float:
    try:
        out = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}") from None
    if out <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0: {value!r}")
    return out


def build_table_manager(settings: Settings) -> TableManager:
    return TableManager(client=dynamodb_client(settings))


@contextmanager
def cancel_on_signals(*signums: int) -> Iterator[threading.Event]:
    """Yield an Event that is set when one of `signums` arrives.

    Handlers can only be installed from the main thread; elsewhere the event
    is still usable but only set by the caller.
    """
    cancel = threading.Event()
    if threading.current_thread() is not threading.main_thread():
        yield cancel
        return

    previous = {}
    for signum in signums or (signal.SIGINT, signal.SIGTERM):
        previous[signum] = signal.getsignal(signum)
        signal.signal(signum, lambda *_: cancel.set())
    try:
        yield cancel
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)
