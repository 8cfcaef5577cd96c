"""Client for the backend's account endpoints (login and registration)."""
import logging
from typing import NamedTuple, Optional

import requests

from .errors import ServiceError
from .records import UserRecord

logger = logging.getLogger(__name__)


class AuthResult(NamedTuple):
    token: str
    user: UserRecord


def _error_message(resp, fallback: str) -> str:
    try:
        return (resp.json() or {}).get("message") or fallback
    except ValueError:
        return fallback


class HttpAuthService:
    def __init__(self, base_url: str, timeout: float = 5.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()

    def _post(self, path: str, payload: dict, failure: str):
        url = f"{self.base_url}{path}"
        try:
            resp = self.http.post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("Auth service unreachable at %s: %s", url, e)
            raise ServiceError(f"{failure}. Check server.") from e
        if not resp.ok:
            raise ServiceError(_error_message(resp, failure), status=resp.status_code)
        try:
            return resp.json()
        except ValueError as e:
            raise ServiceError(f"{failure}: malformed response", status=resp.status_code) from e

    def login(self, email: str, password: str) -> AuthResult:
        data = self._post("/auth/login", {"email": email, "password": password}, "Login failed")
        try:
            return AuthResult(token=data["token"], user=UserRecord.model_validate(data["user"]))
        except (KeyError, TypeError, ValueError) as e:
            raise ServiceError("Login failed: malformed response", status=200) from e

    def register(self, fields: dict):
        data = self._post("/auth/register", fields, "Registration failed")
        return data.get("userId")
