"""In-process account state cache; entries are dropped when membership changes."""

import logging
import time
from dataclasses import dataclass

from .constants import LOGGER_NAME, SCHEME_USERNAME

log = logging.getLogger(LOGGER_NAME)

_CACHE_EXPIRY_SECONDS = 300  # 5 minutes


@dataclass(frozen=True)
class AccountState:
    account_id: int
    full_name: str | None
    username: str | None
    group_ids: frozenset


class AccountCache:
    """Account state by id, loaded from the store on a miss.

    Usage:
        cache = AccountCache(store)
        state = cache.get(account_id)
        cache.evict(account_id)

    Entries expire after expiry_seconds so changes made outside this process
    are eventually picked up.
    """

    def __init__(self, store, expiry_seconds=_CACHE_EXPIRY_SECONDS):
        self._store = store
        self.expiry_seconds = expiry_seconds
        self._entries = {}

    def get(self, account_id):
        """Return cached AccountState, or None if the account does not exist."""
        if account_id in self._entries:
            state, timestamp = self._entries[account_id]
            if time.time() - timestamp < self.expiry_seconds:
                return state
            del self._entries[account_id]

        state = self._load(account_id)
        if state is not None:
            self._entries[account_id] = (state, time.time())
        return state

    def _load(self, account_id):
        db = self._store.open()
        try:
            account = db.get_account(account_id)
            if account is None:
                return None
            username = None
            for ext_id in db.external_ids_by_account(account_id):
                if ext_id.scheme == SCHEME_USERNAME:
                    username = ext_id.key
                    break
            group_ids = frozenset(m.group_id for m in db.group_members_by_account(account_id))
            return AccountState(
                account_id=account.account_id,
                full_name=account.full_name,
                username=username,
                group_ids=group_ids,
            )
        finally:
            db.close()

    def evict(self, account_id):
        """Remove an account from the cache."""
        if self._entries.pop(account_id, None) is not None:
            log.info(f"[Account Cache] Evicted account {account_id}")

    def clear(self):
        self._entries.clear()
