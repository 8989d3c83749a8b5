from unittest import mock

import pytest
import requests

from auth import (
    AuthError,
    AuthService,
    FirebaseIdentityProvider,
    IdentityProvider,
    MSG_FILL_ALL,
    MSG_LOGIN_OK,
    MSG_PASSWORD_MISMATCH,
    MSG_REGISTER_OK,
    validate_login,
    validate_registration,
)


class DummyIdentityProvider(IdentityProvider):
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def sign_in(self, email, password):
        self.calls.append(("sign_in", email))
        if self.error:
            raise AuthError(self.error)
        return "uid-1"

    def sign_up(self, email, password):
        self.calls.append(("sign_up", email))
        if self.error:
            raise AuthError(self.error)
        return "uid-2"


@pytest.mark.parametrize("email,password", [("", "x"), ("a@b.se", ""), ("", "")])
def test_login_requires_all_fields(email, password):
    assert validate_login(email, password) == MSG_FILL_ALL


def test_registration_requires_matching_passwords():
    assert validate_registration("a@b.se", "hemligt", "annat") == MSG_PASSWORD_MISMATCH
    assert validate_registration("a@b.se", "hemligt", "") == MSG_FILL_ALL
    assert validate_registration("a@b.se", "hemligt", "hemligt") is None


def test_invalid_form_never_reaches_provider():
    provider = DummyIdentityProvider()
    service = AuthService(provider)

    result = service.register("a@b.se", "ett", "två")

    assert not result.success
    assert result.message == MSG_PASSWORD_MISMATCH
    assert provider.calls == []


def test_login_success_and_failure():
    ok = AuthService(DummyIdentityProvider()).login("a@b.se", "pw")
    assert ok.success and ok.message == MSG_LOGIN_OK and ok.user_id == "uid-1"

    failed = AuthService(DummyIdentityProvider(error="INVALID_PASSWORD")).login("a@b.se", "pw")
    assert not failed.success
    assert failed.message == "Inloggningen misslyckades: INVALID_PASSWORD"


def test_register_success():
    result = AuthService(DummyIdentityProvider()).register("a@b.se", "pw", "pw")
    assert result.success
    assert result.message == MSG_REGISTER_OK


def _firebase_response(status, payload):
    response = mock.Mock()
    response.status_code = status
    response.json.return_value = payload
    return response


def test_firebase_sign_in_posts_credentials():
    session = mock.Mock(spec=requests.Session)
    session.post.return_value = _firebase_response(200, {"localId": "abc"})
    provider = FirebaseIdentityProvider("key-123", session=session)

    assert provider.sign_in("a@b.se", "pw") == "abc"

    args, kwargs = session.post.call_args
    assert args[0].endswith("/accounts:signInWithPassword")
    assert kwargs["params"] == {"key": "key-123"}
    assert kwargs["json"]["email"] == "a@b.se"


def test_firebase_error_message_is_surfaced():
    session = mock.Mock(spec=requests.Session)
    session.post.return_value = _firebase_response(400, {"error": {"message": "EMAIL_EXISTS"}})
    provider = FirebaseIdentityProvider("key-123", session=session)

    with pytest.raises(AuthError, match="EMAIL_EXISTS"):
        provider.sign_up("a@b.se", "pw")


def test_firebase_transport_error():
    session = mock.Mock(spec=requests.Session)
    session.post.side_effect = requests.ConnectionError("nere")
    provider = FirebaseIdentityProvider("key-123", session=session)

    with pytest.raises(AuthError):
        provider.sign_in("a@b.se", "pw")


def test_firebase_requires_api_key():
    with pytest.raises(ValueError):
        FirebaseIdentityProvider("")


@pytest.mark.parametrize("status,payload", [
    (200, {"idToken": "x"}),
    (200, ["localId"]),
    (400, "Bad Request"),
    (400, {"error": "INVALID"}),
])
def test_firebase_malformed_responses_raise_auth_error(status, payload):
    session = mock.Mock(spec=requests.Session)
    session.post.return_value = _firebase_response(status, payload)
    provider = FirebaseIdentityProvider("key-123", session=session)

    with pytest.raises(AuthError):
        provider.sign_in("a@b.se", "pw")


def test_login_reports_missing_user_id_as_failure():
    session = mock.Mock(spec=requests.Session)
    session.post.return_value = _firebase_response(200, {"idToken": "x"})
    service = AuthService(FirebaseIdentityProvider("key-123", session=session))

    result = service.login("a@b.se", "pw")

    assert not result.success
    assert result.message.startswith("Inloggningen misslyckades:")
