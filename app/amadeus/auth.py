import threading
import time
from typing import Callable, Optional, Tuple

from app.obs.logger import log_event

# Refresh this many seconds before the provider's stated expiry
EXPIRY_MARGIN_SECONDS = 60
DEFAULT_EXPIRES_IN = 1799


class TokenCache:
    """Single bearer token plus its expiry, shared by every provider call.

    ``exchange`` performs the client-credentials call and returns
    ``(access_token, expires_in_seconds)``. Refresh is single-flight: callers
    that find the token stale queue on the lock and reuse whatever the first
    of them fetched.
    """

    def __init__(self, exchange: Callable[[], Tuple[str, Optional[int]]],
                 clock: Callable[[], float] = time.time,
                 margin: int = EXPIRY_MARGIN_SECONDS):
        self._exchange = exchange
        self._clock = clock
        self._margin = margin
        self._lock = threading.Lock()
        self.token: Optional[str] = None
        self.expires_at: Optional[float] = None

    def _fresh_token(self) -> Optional[str]:
        # Snapshot both fields once; invalidate() may run between reads
        token, expires_at = self.token, self.expires_at
        if token and expires_at is not None and expires_at > self._clock() + self._margin:
            return token
        return None

    def get_token(self) -> str:
        token = self._fresh_token()
        if token:
            return token
        with self._lock:
            # Another thread may have refreshed while we waited
            token = self._fresh_token()
            if token:
                return token
            log_event("token_refresh")
            token, expires_in = self._exchange()
            self.set(token, expires_in)
            return token

    def set(self, token: str, expires_in: Optional[int]) -> None:
        """Replace token and expiry together."""
        if expires_in is None:
            expires_in = DEFAULT_EXPIRES_IN
        self.token, self.expires_at = token, self._clock() + float(expires_in)

    def invalidate(self) -> None:
        """Forget the token so the next get_token() forces an exchange."""
        with self._lock:
            self.token, self.expires_at = None, None
        log_event("token_invalidated", level="WARNING")
