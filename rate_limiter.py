"""
rate_limiter.py - Action Rate Limiting
SwiftUI Playground

Counts actions per client in a windowed store and rejects clients that go
past the configured threshold.

    limiter = RateLimiter()
    if limiter.allow(ip, 'preview'):
        limiter.record(ip, 'preview')

The default store is in-memory and per-process. For multiple workers, pass a
shared store that implements the same read/increment/write/delete/ttl methods.
"""

import time
import hashlib
import logging
import threading
from functools import wraps
from flask import request, jsonify, current_app
from config import SwiftUIError, get_configuration

logger = logging.getLogger(__name__)

KEY_PREFIX = 'swift_ui:rate_limit'
RATE_LIMIT_MESSAGE = 'Rate limit exceeded. Please try again later.'


class RateLimitExceeded(SwiftUIError):
    """Raised when a client records more actions than the window allows."""
    pass


class MemoryStore:
    """
    Thread-safe counter store with per-key expiry.

    Expired keys are dropped when read, and every sweep_every writes the whole
    map is swept so identifiers that never come back do not accumulate.
    """

    def __init__(self, clock=time.monotonic, sweep_every: int = 256):
        self._clock = clock
        self._data = {}
        self._lock = threading.Lock()
        self._sweep_every = sweep_every
        self._writes = 0

    def __len__(self):
        with self._lock:
            return len(self._data)

    def _store(self, key, value, expires_at):
        self._data[key] = (value, expires_at)
        self._writes += 1
        if self._writes % self._sweep_every == 0:
            self._sweep()

    def _sweep(self):
        now = self._clock()
        expired = [
            key for key, (_, expires_at) in self._data.items()
            if expires_at is not None and expires_at <= now
        ]
        for key in expired:
            del self._data[key]
        if expired:
            logger.debug(f"MemoryStore: Swept {len(expired)} expired keys")

    def _live_entry(self, key):
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and expires_at <= self._clock():
            del self._data[key]
            return None
        return entry

    def read(self, key):
        with self._lock:
            entry = self._live_entry(key)
            return entry[0] if entry else None

    def write(self, key, value, expires_in=None):
        with self._lock:
            expires_at = self._clock() + expires_in if expires_in else None
            self._store(key, value, expires_at)

    def increment(self, key, amount=1, expires_in=None) -> int:
        """Increment a counter, starting it at zero with the given expiry."""
        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                expires_at = self._clock() + expires_in if expires_in else None
                value = amount
            else:
                value = entry[0] + amount
                expires_at = entry[1]
            self._store(key, value, expires_at)
            return value

    def delete(self, key):
        with self._lock:
            self._data.pop(key, None)

    def ttl(self, key):
        """Seconds until the key expires, or None if it has no expiry."""
        with self._lock:
            entry = self._live_entry(key)
            if entry is None or entry[1] is None:
                return None
            return entry[1] - self._clock()

    def clear(self):
        with self._lock:
            self._data.clear()


class RateLimiter:
    def __init__(self, store=None, threshold: int = None, window: int = None):
        self.store = store if store is not None else MemoryStore()
        self._threshold = threshold
        self._window = window

    @property
    def threshold(self) -> int:
        if self._threshold is not None:
            return self._threshold
        return get_configuration().rate_limit_threshold

    @property
    def window(self) -> int:
        if self._window is not None:
            return self._window
        return get_configuration().rate_limit_window

    @property
    def enabled(self) -> bool:
        return get_configuration().rate_limit_actions

    def cache_key(self, identifier, action_name=None) -> str:
        # Hash the identifier so raw IPs never end up in store keys
        digest = hashlib.sha256(str(identifier).encode('utf-8')).hexdigest()[:17]
        key = f"{KEY_PREFIX}:{digest}"
        if action_name:
            key = f"{key}:{action_name}"
        return key

    def allow(self, identifier, action_name=None) -> bool:
        """Check without recording. True when the client is under the limit."""
        if not self.enabled:
            return True

        try:
            count = self.current_count(identifier, action_name)
        except Exception as e:
            logger.error(f"Rate limit store error: {e}")
            return True

        if count >= self.threshold:
            logger.warning(
                f"[SECURITY] Rate limit exceeded for {self.cache_key(identifier, action_name)}"
            )
            return False
        return True

    def record(self, identifier, action_name=None) -> bool:
        """
        Count one action for the client.

        Raises:
            RateLimitExceeded: If the count goes past the threshold
        """
        if not self.enabled:
            return True

        key = self.cache_key(identifier, action_name)
        try:
            count = self.store.increment(key, 1, expires_in=self.window)
        except Exception as e:
            logger.error(f"Rate limit store error: {e}")
            return True

        if count > self.threshold:
            raise RateLimitExceeded(f"Rate limit exceeded: {count} actions in {self.window} seconds")
        return True

    def reset(self, identifier, action_name=None) -> None:
        self.store.delete(self.cache_key(identifier, action_name))

    def current_count(self, identifier, action_name=None) -> int:
        return int(self.store.read(self.cache_key(identifier, action_name)) or 0)

    def remaining(self, identifier, action_name=None) -> int:
        return max(self.threshold - self.current_count(identifier, action_name), 0)

    def reset_in(self, identifier, action_name=None) -> int:
        ttl = self.store.ttl(self.cache_key(identifier, action_name))
        if ttl and ttl > 0:
            return int(ttl)
        return self.window


default_limiter = RateLimiter()


def get_client_ip() -> str:
    """
    Get the client IP address from request headers.
    Handles proxies by checking X-Forwarded-For first.
    """
    if request.headers.get('X-Forwarded-For'):
        return request.headers.get('X-Forwarded-For').split(',')[0].strip()
    elif request.headers.get('X-Real-IP'):
        return request.headers.get('X-Real-IP')
    return request.remote_addr or 'unknown'


def rate_limit(limiter: RateLimiter = None, identifier=None):
    """
    Decorator that returns 429 once the client exceeds the limit.

    Args:
        limiter: RateLimiter to use (the app's limiter otherwise)
        identifier: Callable returning the client identity (client IP otherwise)
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            active = limiter or current_app.extensions.get('rate_limiter', default_limiter)
            client = identifier() if identifier else get_client_ip()
            action_name = request.endpoint

            try:
                if not active.allow(client, action_name):
                    return _limited_response(active)
                active.record(client, action_name)
            except RateLimitExceeded as e:
                current_app.logger.warning(f"{e} ({request.path})")
                return _limited_response(active)

            return f(*args, **kwargs)

        return decorated_function

    return decorator


def _limited_response(limiter: RateLimiter):
    response = jsonify({
        'success': False,
        'error': RATE_LIMIT_MESSAGE,
        'retry_after': limiter.window,
    })
    response.status_code = 429
    response.headers['Retry-After'] = str(limiter.window)
    return response
