"""
In-memory sliding-window rate limiter

Counts hits per key (client IP) inside a rolling window. State lives in the
process, so each server instance counts on its own. Keys whose hits have all
expired are swept at most once per window.
"""

import threading
import time
from collections import deque

from flask import request

from church_site.errors import RateLimitError


class RateLimiter:
    def __init__(self, max_requests, window, clock=time.monotonic):
        self.max_requests = int(max_requests)
        self.window = float(window)
        self.clock = clock
        self._hits = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def __len__(self):
        return len(self._hits)

    def _trim(self, dq, now):
        while dq and now - dq[0] >= self.window:
            dq.popleft()

    def _sweep(self, now):
        for key in list(self._hits):
            dq = self._hits[key]
            self._trim(dq, now)
            if not dq:
                del self._hits[key]
        self._last_sweep = now

    def hit(self, key):
        """Record one request for `key`; raise RateLimitError past the limit."""
        now = self.clock()
        with self._lock:
            if now - self._last_sweep >= self.window:
                self._sweep(now)

            dq = self._hits.setdefault(key, deque())
            self._trim(dq, now)

            if len(dq) >= self.max_requests:
                retry_after = max(1, int(self.window - (now - dq[0])))
                raise RateLimitError(retry_after)

            dq.append(now)
            return self.max_requests - len(dq)

    def reset(self, key=None):
        with self._lock:
            if key is None:
                self._hits.clear()
            else:
                self._hits.pop(key, None)


def client_ip():
    """Client address. Forwarded headers are applied by ProxyFix (PROXY_COUNT)."""
    return request.remote_addr or 'unknown'
