"""Bearer-token session persisted in a private dotenv file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from dotenv import dotenv_values, set_key, unset_key

from .models import AuthToken

log = logging.getLogger(__name__)

_TOKEN_KEY = "ACCESS_TOKEN"
_TYPE_KEY = "TOKEN_TYPE"


class AuthSession:
    """Owns the stored credentials. Nothing else touches the session file."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._access_token: Optional[str] = None
        self._token_type = "bearer"
        self._load()

    def _load(self) -> None:
        if not self._path.exists():
            return
        values = dotenv_values(self._path)
        self._access_token = values.get(_TOKEN_KEY) or None
        self._token_type = values.get(_TYPE_KEY) or "bearer"

    @property
    def access_token(self) -> Optional[str]:
        return self._access_token

    @property
    def token_type(self) -> str:
        return self._token_type

    @property
    def is_authenticated(self) -> bool:
        return self._access_token is not None

    def store(self, token: AuthToken) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        if not self._path.exists():
            self._path.touch(mode=0o600)
        set_key(str(self._path), _TOKEN_KEY, token.access_token)
        set_key(str(self._path), _TYPE_KEY, token.token_type)
        self._access_token = token.access_token
        self._token_type = token.token_type
        log.info("Stored session token")

    def clear(self) -> None:
        if self._path.exists():
            values = dotenv_values(self._path)
            for key in (_TOKEN_KEY, _TYPE_KEY):
                if key in values:
                    unset_key(str(self._path), key)
        self._access_token = None
        self._token_type = "bearer"
        log.info("Cleared session token")

    def auth_header(self) -> Optional[str]:
        """Value for the Authorization header, e.g. ``Bearer abc123``."""
        if not self._access_token:
            return None
        token_type = self._token_type[:1].upper() + self._token_type[1:]
        return f"{token_type} {self._access_token}"
