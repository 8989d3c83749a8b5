"""
Inloggning och registrering mot extern identitetsleverantör (Firebase Auth)
"""

import logging
from dataclasses import dataclass
from typing import Optional

import requests

from config import FIREBASE_AUTH_URL, REQUEST_TIMEOUT

logger = logging.getLogger(__name__)

MSG_FILL_ALL = "Fyll i alla fält"
MSG_PASSWORD_MISMATCH = "Lösenorden matchar inte"
MSG_LOGIN_OK = "Inloggningen lyckades!"
MSG_LOGIN_FAILED = "Inloggningen misslyckades: {reason}"
MSG_REGISTER_OK = "Registreringen lyckades!"
MSG_REGISTER_FAILED = "Registreringen misslyckades: {reason}"


class AuthError(Exception):
    """Fel från identitetsleverantören"""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


@dataclass(frozen=True)
class AuthResult:
    success: bool
    message: str
    user_id: Optional[str] = None


def validate_login(email: str, password: str) -> Optional[str]:
    """Returnera felmeddelande, eller None om formuläret är giltigt"""
    if not email or not password:
        return MSG_FILL_ALL
    return None


def validate_registration(email: str, password: str, confirm_password: str) -> Optional[str]:
    """Returnera felmeddelande, eller None om formuläret är giltigt"""
    if not email or not password or not confirm_password:
        return MSG_FILL_ALL
    if password != confirm_password:
        return MSG_PASSWORD_MISMATCH
    return None


class IdentityProvider:
    """Basklass för identitetsleverantörer"""

    def sign_in(self, email: str, password: str) -> str:
        """Logga in och returnera användar-id"""
        raise NotImplementedError

    def sign_up(self, email: str, password: str) -> str:
        """Skapa konto och returnera användar-id"""
        raise NotImplementedError


class FirebaseIdentityProvider(IdentityProvider):
    """Firebase Auth via REST-API:t"""

    def __init__(
        self,
        api_key: str,
        session: Optional[requests.Session] = None,
        timeout: float = REQUEST_TIMEOUT
    ):
        if not api_key:
            raise ValueError("FIREBASE_API_KEY saknas")
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout

    def sign_in(self, email: str, password: str) -> str:
        return self._call("accounts:signInWithPassword", email, password)

    def sign_up(self, email: str, password: str) -> str:
        return self._call("accounts:signUp", email, password)

    def _call(self, endpoint: str, email: str, password: str) -> str:
        url = f"{FIREBASE_AUTH_URL}/{endpoint}"
        body = {
            "email": email,
            "password": password,
            "returnSecureToken": True
        }
        try:
            response = self.session.post(
                url, params={"key": self.api_key}, json=body, timeout=self.timeout
            )
            data = response.json()
        except requests.RequestException as e:
            raise AuthError(str(e))
        except ValueError:
            raise AuthError("ogiltigt svar från identitetsleverantören")

        if not isinstance(data, dict):
            raise AuthError(f"oväntat svar från identitetsleverantören (HTTP {response.status_code})")

        if response.status_code != 200:
            error = data.get("error")
            message = error.get("message") if isinstance(error, dict) else None
            raise AuthError(message or f"HTTP {response.status_code}")

        if "localId" not in data:
            raise AuthError("svaret saknar användar-id")
        return data["localId"]


class AuthService:
    """Validerar formulär lokalt och skickar vidare till identitetsleverantören"""

    def __init__(self, provider: IdentityProvider):
        self.provider = provider

    def login(self, email: str, password: str) -> AuthResult:
        error = validate_login(email, password)
        if error:
            return AuthResult(False, error)

        try:
            user_id = self.provider.sign_in(email, password)
        except AuthError as e:
            logger.info("Inloggning misslyckades: %s", e.reason)
            return AuthResult(False, MSG_LOGIN_FAILED.format(reason=e.reason))
        return AuthResult(True, MSG_LOGIN_OK, user_id)

    def register(self, email: str, password: str, confirm_password: str) -> AuthResult:
        error = validate_registration(email, password, confirm_password)
        if error:
            return AuthResult(False, error)

        try:
            user_id = self.provider.sign_up(email, password)
        except AuthError as e:
            logger.info("Registrering misslyckades: %s", e.reason)
            return AuthResult(False, MSG_REGISTER_FAILED.format(reason=e.reason))
        return AuthResult(True, MSG_REGISTER_OK, user_id)
