"""
Stats channel

Publishing side: the CRUD controller sends `stats_changed` after a mutation
that changes collection sizes. Subscribing side: DashboardStats notes which
collection changed last. Counters are read from the store on every call, so
every worker process shows the same numbers.
"""

import logging
from datetime import datetime, timezone

from blinker import Namespace

from church_site.errors import StoreError

logger = logging.getLogger(__name__)

_signals = Namespace()

# sender is the collection name
stats_changed = _signals.signal('stats-changed')

DASHBOARD_COLLECTIONS = ('events', 'studies', 'gallery')


class DashboardStats:
    """Counters for the admin dashboard."""

    def __init__(self, store, collections=DASHBOARD_COLLECTIONS):
        self.store = store
        self.collections = tuple(collections)
        self.last_change = None
        stats_changed.connect(self._on_stats_changed)

    def _on_stats_changed(self, sender, **extra):
        if sender in self.collections:
            logger.debug('Dashboard collection changed: %s', sender)
            self.last_change = (sender, datetime.now(timezone.utc))

    def counts(self):
        counts = {}
        for name in self.collections:
            try:
                counts[name] = self.store.count(name)
            except StoreError as e:
                logger.error('Could not count %s: %s', name, e.message)
                counts[name] = 0
        logger.debug('Dashboard counters %s', ' '.join(f'{k}={v}' for k, v in counts.items()))
        return counts
