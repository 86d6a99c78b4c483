from __future__ import annotations

import pytest
from ocpi_hub.models.enums import PartnerStatus, PartnerType, RoleType
from ocpi_hub.services._shared.errors import ForbiddenError, UnauthorizedError
from ocpi_hub.services.auth.resolver import AuthenticationResolver, extract_token
from ocpi_hub.services.credentials.dto import CredentialRole, PartnerIdentity
from tests.factories.partner import credentials_in


@pytest.fixture
def resolver(service) -> AuthenticationResolver:
    return AuthenticationResolver(service)


@pytest.fixture
def cpo_token(service) -> str:
    return service.register(credentials_in(), PartnerType.CPO).token


class TestExtractToken:
    @pytest.mark.parametrize(
        "header, expected",
        [
            ("Token abc123", "abc123"),
            ("abc123", "abc123"),
            # Only one exact, case-sensitive prefix is stripped
            ("token abc123", "token abc123"),
            ("Token Token abc", "Token abc"),
            ("Bearer abc123", "Bearer abc123"),
            # A bare prefix carries no value to strip
            ("Token ", "Token "),
        ],
    )
    def test_prefix_handling(self, header, expected):
        assert extract_token(header) == expected

    @pytest.mark.parametrize("header", [None, ""])
    def test_missing_header(self, header):
        with pytest.raises(UnauthorizedError, match="missing authorization token"):
            extract_token(header)


class TestResolve:
    def test_resolves_prefixed_token(self, resolver, cpo_token):
        identity = resolver.resolve(f"Token {cpo_token}")

        assert identity.partner_id == "DE-ABC"
        assert identity.type == PartnerType.CPO

    def test_resolves_bare_token(self, resolver, cpo_token):
        assert resolver.resolve(cpo_token).partner_id == "DE-ABC"

    def test_bare_prefix_is_an_unknown_token(self, resolver, cpo_token):
        with pytest.raises(UnauthorizedError, match="invalid token"):
            resolver.resolve("Token ")

    def test_unknown_token(self, resolver):
        with pytest.raises(UnauthorizedError, match="invalid token"):
            resolver.resolve("Token nope")

    def test_inactive_partner(self, resolver, service, cpo_token):
        service.set_status("DE-ABC", PartnerStatus.INACTIVE)

        with pytest.raises(UnauthorizedError, match="partner is not active"):
            resolver.resolve(f"Token {cpo_token}")


class TestEnsureType:
    def test_allows_matching_type(self, resolver, service):
        role = CredentialRole(role=RoleType.EMSP, party_id="MSP", country_code="NL")
        token = service.register(credentials_in(role), PartnerType.EMSP).token
        identity = resolver.resolve(token)

        assert AuthenticationResolver.ensure_type(identity, PartnerType.EMSP) is identity

    def test_rejects_other_type(self):
        identity = PartnerIdentity(partner_id="DE-ABC", type=PartnerType.CPO)

        with pytest.raises(ForbiddenError, match="this endpoint requires EMSP role"):
            AuthenticationResolver.ensure_type(identity, PartnerType.EMSP)

    def test_requires_identity(self):
        with pytest.raises(UnauthorizedError):
            AuthenticationResolver.ensure_type(None, PartnerType.CPO)
