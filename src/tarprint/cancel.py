from __future__ import annotations

import signal
import threading
from typing import Any

from tarprint.errors import Interrupted


class CancellationToken:
    """Cooperative cancellation flag shared between a caller and a build.

    The build only ever reads it; whoever owns the token sets it.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def check(self) -> None:
        if self._event.is_set():
            raise Interrupted()


def install_sigint_handler(token: CancellationToken) -> Any:
    """Route SIGINT to ``token`` and return the previous handler."""

    def _handler(signum: int, frame: Any) -> None:
        token.cancel()

    return signal.signal(signal.SIGINT, _handler)
