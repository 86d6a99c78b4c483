from __future__ import annotations

import re

import pytest
from ocpi_hub.infra.tokens import SecureTokenIssuer
from ocpi_hub.infra.tokens import secure_token_issuer as module
from ocpi_hub.services._shared.errors import InternalError
from ocpi_hub.services._shared.ports import StubTokenIssuer

HEX_64 = re.compile(r"^[0-9a-f]{64}$")


class TestSecureTokenIssuer:
    def test_mints_64_hex_characters(self):
        assert HEX_64.match(SecureTokenIssuer().mint())

    def test_tokens_are_distinct(self):
        issuer = SecureTokenIssuer()
        tokens = {issuer.mint() for _ in range(200)}
        assert len(tokens) == 200

    def test_randomness_failure(self, monkeypatch):
        def _broken(_: int) -> bytes:
            raise OSError("entropy pool unavailable")

        monkeypatch.setattr(module.secrets, "token_bytes", _broken)

        with pytest.raises(InternalError, match="failed to generate token"):
            SecureTokenIssuer().mint()


class TestStubTokenIssuer:
    def test_scripted_then_sequence(self):
        issuer = StubTokenIssuer(["a", "a"])

        assert [issuer.mint() for _ in range(4)] == ["a", "a", "hub-token-0001", "hub-token-0002"]
        assert issuer.minted == ["a", "a", "hub-token-0001", "hub-token-0002"]

    def test_failure_mode(self):
        with pytest.raises(InternalError):
            StubTokenIssuer(fail=True).mint()
