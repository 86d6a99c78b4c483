from __future__ import annotations

import threading
from collections import deque
from collections.abc import Iterable
from typing import Protocol

from ocpi_hub.services._shared.errors import InternalError


class TokenIssuer(Protocol):
    """Port for minting opaque hub tokens."""

    def mint(self) -> str:
        """
        Return a fresh token.

        :raises InternalError: If the randomness source is unavailable.
        """
        ...


class StubTokenIssuer(TokenIssuer):
    """
    Deterministic issuer used in unit tests.

    Scripted ``tokens`` are handed out first (repeats allowed, to provoke
    collisions); afterwards tokens follow the ``hub-token-<seq>`` pattern.
    """

    def __init__(self, tokens: Iterable[str] | None = None, *, fail: bool = False) -> None:
        self._scripted: deque[str] = deque(tokens or ())
        self._seq = 0
        self._fail = fail
        self._lock = threading.Lock()
        self.minted: list[str] = []

    def mint(self) -> str:
        if self._fail:
            raise InternalError("failed to generate token")
        with self._lock:
            if self._scripted:
                token = self._scripted.popleft()
            else:
                self._seq += 1
                token = f"hub-token-{self._seq:04d}"
            self.minted.append(token)
            return token
