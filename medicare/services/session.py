import logging
import time
from typing import Optional

import jwt
from pydantic import ValidationError as SchemaError

from .generations import GenerationCounter
from .records import UserRecord
from .storage import AUTH_TOKEN_KEY, CURRENT_USER_KEY, Storage

logger = logging.getLogger(__name__)

AUTH_CHANNEL = "auth"


def token_expired(token: str, now: float = None) -> bool:
    """True when the token carries an ``exp`` claim in the past.

    The signature is not checked here; only the backend can do that. Tokens
    that are not JWTs are treated as opaque and never expire locally.
    """
    try:
        claims = jwt.decode(token, options={"verify_signature": False, "verify_exp": False})
    except jwt.InvalidTokenError:
        return False
    exp = claims.get("exp")
    if exp is None:
        return False
    return float(exp) <= (now if now is not None else time.time())


class SessionState:
    def __init__(self, storage: Storage, auth_service, generations: GenerationCounter):
        self._storage = storage
        self._auth = auth_service
        self._generations = generations
        self.current_user: Optional[UserRecord] = None
        self.auth_token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None and self.auth_token is not None

    def load(self) -> None:
        try:
            token = self._storage.get(AUTH_TOKEN_KEY)
            user = self._storage.get(CURRENT_USER_KEY)
        except ValueError as e:
            logger.warning("Discarding unreadable stored session: %s", e)
            self._forget()
            return
        if not (token and user):
            return
        if token_expired(token):
            logger.info("Stored session token expired; signing out")
            self._forget()
            return
        try:
            self.current_user = UserRecord.model_validate(user)
        except SchemaError as e:
            logger.warning("Discarding unreadable stored user: %s", e)
            self._forget()
            return
        self.auth_token = token
        logger.info("User loaded from storage: %s", self.current_user.first_name)

    def login(self, email: str, password: str) -> Optional[UserRecord]:
        """Sign in through the auth service.

        Returns None when the session was signed out (or another login
        started) while the request was in flight; the response is dropped.
        """
        token = self._generations.begin(AUTH_CHANNEL)
        result = self._auth.login(email, password)
        if not self._generations.is_current(AUTH_CHANNEL, token):
            logger.info("Discarding stale login response")
            return None
        self._storage.set(AUTH_TOKEN_KEY, result.token)
        self._storage.set(CURRENT_USER_KEY, result.user.to_json())
        self.auth_token = result.token
        self.current_user = result.user
        logger.info("Login successful for user %s", result.user.id)
        return result.user

    def register(self, fields: dict):
        return self._auth.register(fields)

    def logout(self) -> None:
        self._generations.invalidate(AUTH_CHANNEL)
        self._forget()
        logger.info("Logged out")

    def _forget(self) -> None:
        self._storage.delete(AUTH_TOKEN_KEY)
        self._storage.delete(CURRENT_USER_KEY)
        self.auth_token = None
        self.current_user = None
