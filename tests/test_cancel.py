from __future__ import annotations

import os
import signal

import pytest

from tarprint.cancel import CancellationToken, install_sigint_handler
from tarprint.errors import Interrupted


def test_token_starts_clear_and_latches() -> None:
    token = CancellationToken()
    assert token.cancelled is False
    token.check()

    token.cancel()
    assert token.cancelled is True
    with pytest.raises(Interrupted):
        token.check()


def test_sigint_sets_token() -> None:
    token = CancellationToken()
    previous = install_sigint_handler(token)
    try:
        os.kill(os.getpid(), signal.SIGINT)
    finally:
        signal.signal(signal.SIGINT, previous)

    assert token.cancelled is True
