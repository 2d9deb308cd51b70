import pytest
from google.auth import exceptions as google_auth_exceptions

from api.features.auth import service as auth_service
from api.features.auth.exceptions import (
    EmptyIdentityPayloadError,
    IdentityVerificationError,
)
from api.features.auth.service import GoogleIdentityVerifier, IdentityVerifier, LoginService
from api.shared.exceptions import ErrorKind, ValidationError

PAYLOAD = {
    "sub": "109876543210",
    "email": "ada@example.com",
    "name": "Ada",
    "picture": "https://example.com/ada.png",
    "aud": "client-id",
}


class FakeVerifier(IdentityVerifier):
    def __init__(self, payload=None, error=None):
        self.payload = payload
        self.error = error
        self.credentials = []

    async def verify(self, credential):
        self.credentials.append(credential)
        if self.error is not None:
            raise self.error
        return self.payload


async def test_login_returns_payload_and_records_user(user_store, clock):
    service = LoginService(FakeVerifier(PAYLOAD), user_store, clock=clock)

    payload = await service.login("token")

    assert payload == PAYLOAD
    user = await user_store.get("109876543210")
    assert user.email == "ada@example.com"
    assert user.last_login == clock.now


async def test_login_again_updates_last_login(user_store, clock):
    service = LoginService(FakeVerifier(PAYLOAD), user_store, clock=clock)
    await service.login("token")
    clock.advance(3600)

    await service.login("token")

    assert (await user_store.get("109876543210")).last_login == clock.now


@pytest.mark.parametrize("credential", [None, ""])
async def test_login_requires_credential(user_store, credential):
    verifier = FakeVerifier(PAYLOAD)

    with pytest.raises(ValidationError, match="Credential missing."):
        await LoginService(verifier, user_store).login(credential)

    assert verifier.credentials == []


@pytest.mark.parametrize("payload", [None, {}, {"email": "no-sub@example.com"}])
async def test_login_rejects_empty_payload(user_store, payload):
    with pytest.raises(EmptyIdentityPayloadError) as exc_info:
        await LoginService(FakeVerifier(payload), user_store).login("token")

    assert exc_info.value.status_code == 400
    assert await user_store.get("109876543210") is None


async def test_login_propagates_verification_failure(user_store):
    verifier = FakeVerifier(error=IdentityVerificationError("Token expired"))

    with pytest.raises(IdentityVerificationError) as exc_info:
        await LoginService(verifier, user_store).login("token")

    assert exc_info.value.kind is ErrorKind.DEPENDENCY_FAILURE


async def test_google_verifier_passes_audience(monkeypatch):
    seen = {}

    def fake_verify(credential, request, audience):
        seen.update(credential=credential, audience=audience)
        return PAYLOAD

    monkeypatch.setattr(auth_service.id_token, "verify_oauth2_token", fake_verify)

    payload = await GoogleIdentityVerifier("client-id").verify("token")

    assert payload == PAYLOAD
    assert seen == {"credential": "token", "audience": "client-id"}


@pytest.mark.parametrize(
    "error",
    [ValueError("Wrong recipient"), google_auth_exceptions.TransportError("offline")],
)
async def test_google_verifier_maps_errors(monkeypatch, error):
    def fake_verify(credential, request, audience):
        raise error

    monkeypatch.setattr(auth_service.id_token, "verify_oauth2_token", fake_verify)

    with pytest.raises(IdentityVerificationError) as exc_info:
        await GoogleIdentityVerifier("client-id").verify("token")

    assert exc_info.value.error_code == "IDENTITY_VERIFICATION_FAILED"
