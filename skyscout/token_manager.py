from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

import requests

from .models import Token

logger = logging.getLogger(__name__)


class TokenError(RuntimeError):
    """Client-credentials exchange failed."""


class TokenManager:
    """Caches a bearer token obtained through an OAuth2 client-credentials grant.

    The token is reused while ``now < expires_at``, where ``expires_at`` is
    ``issued + expires_in - safety_margin``. A failed exchange raises
    :class:`TokenError` and leaves the previously held state untouched.
    """

    def __init__(
        self,
        token_url: str,
        client_id: str,
        client_secret: str,
        *,
        safety_margin_s: float = 60,
        timeout: float = 10,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.token_url = token_url
        self.client_id = client_id
        self.client_secret = client_secret
        self.safety_margin_s = safety_margin_s
        self.timeout = timeout
        self._clock = clock
        self._token: Optional[Token] = None
        # Serialises refreshes so concurrent callers share one exchange.
        self._lock = threading.Lock()

    @property
    def token(self) -> Optional[Token]:
        return self._token

    def get_token(self) -> Token:
        token = self._token
        if token and token.is_valid(self._clock()):
            return token
        with self._lock:
            token = self._token
            if token and token.is_valid(self._clock()):
                return token
            self._token = self._exchange()
            return self._token

    def _exchange(self) -> Token:
        if not self.client_id or not self.client_secret:
            raise TokenError("client id/secret not configured")

        try:
            resp = requests.post(
                self.token_url,
                data={
                    "grant_type": "client_credentials",
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                },
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise TokenError(f"token request failed: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            raise TokenError(f"HTTP {resp.status_code} – {resp.text[:120]}")

        try:
            data = resp.json()
            access_token = data["access_token"]
            expires_in = float(data["expires_in"])
        except (ValueError, KeyError, TypeError) as exc:
            raise TokenError(f"malformed token response: {exc!r}") from exc
        if not access_token:
            raise TokenError("empty access_token in token response")

        expires_at = self._clock() + expires_in - self.safety_margin_s
        logger.info("Acquired bearer token, valid for %.0fs", expires_in)
        return Token(access_token=access_token, expires_at=expires_at)


__all__ = ["TokenError", "TokenManager"]
