"""Group backend exposing every account as a group containing only itself."""

import logging
import re
from dataclasses import dataclass

from .constants import LOGGER_NAME, SCHEME_USERNAME

log = logging.getLogger(LOGGER_NAME)

UUID_PREFIX = 'user:'
NAME_PREFIX = 'user/'
ACCOUNT_PREFIX = 'userid/'
ACCOUNT_ID_PATTERN = re.compile(r'[1-9][0-9]*')
MAX = 10


@dataclass(frozen=True)
class GroupReference:
    uuid: str
    name: str


def uuid_for(username=None, account_id=None):
    """Single-user group uuid, by username when known, else by account id."""
    if username:
        return UUID_PREFIX + username
    return f'{UUID_PREFIX}{ACCOUNT_PREFIX}{account_id}'


def name_of(full_name, username, account_id):
    """Display name: 'user/Full Name (username)', 'user/username' or 'user/userid/N'."""
    if username and full_name and full_name != username:
        return f'{NAME_PREFIX}{full_name} ({username})'
    if username:
        return NAME_PREFIX + username
    if full_name:
        return NAME_PREFIX + full_name
    return f'{NAME_PREFIX}{ACCOUNT_PREFIX}{account_id}'


class SingleUserGroupBackend:
    """Resolves user:<username> and user:userid/<id> group uuids.

    Usage:
        backend = SingleUserGroupBackend(store, account_cache)
        backend.handles('user:admin')
        backend.get('user:admin')
        backend.suggest('ad')
        backend.membership_of(account_id)
    """

    def __init__(self, store, account_cache):
        self._store = store
        self._account_cache = account_cache

    def handles(self, uuid):
        return bool(uuid) and uuid.startswith(UUID_PREFIX)

    def get(self, uuid):
        if not self.handles(uuid):
            return None

        account_id = self._resolve(uuid[len(UUID_PREFIX):])
        if account_id is None:
            return None
        return self._reference(account_id)

    def suggest(self, name, limit=MAX):
        """Suggest single-user groups whose username starts with name."""
        if name.startswith(NAME_PREFIX):
            name = name[len(NAME_PREFIX):]
        if not name:
            return []

        if name.startswith(ACCOUNT_PREFIX):
            ref = None
            account_id = self._parse_account_id(name[len(ACCOUNT_PREFIX):])
            if account_id is not None:
                ref = self._reference(account_id)
            return [ref] if ref else []

        db = self._store.open()
        try:
            matches = db.search_external_ids(SCHEME_USERNAME, name, limit)
            account_ids = [m.account_id for m in matches]
        finally:
            db.close()

        suggestions = []
        for account_id in account_ids:
            ref = self._reference(account_id)
            if ref:
                suggestions.append(ref)
        log.info(f"[Group Backend] {len(suggestions)} suggestion(s) for '{name}'")
        return suggestions

    def membership_of(self, account_id):
        """Return the uuids of the single-user groups the account belongs to."""
        state = self._account_cache.get(account_id)
        if state is None:
            return frozenset()
        return frozenset([uuid_for(state.username, state.account_id)])

    def _resolve(self, key):
        if key.startswith(ACCOUNT_PREFIX):
            return self._parse_account_id(key[len(ACCOUNT_PREFIX):])

        db = self._store.open()
        try:
            ext_id = db.get_external_id(SCHEME_USERNAME, key)
            return ext_id.account_id if ext_id else None
        finally:
            db.close()

    @staticmethod
    def _parse_account_id(text):
        if ACCOUNT_ID_PATTERN.fullmatch(text):
            return int(text)
        return None

    def _reference(self, account_id):
        state = self._account_cache.get(account_id)
        if state is None:
            return None
        return GroupReference(
            uuid=uuid_for(state.username, state.account_id),
            name=name_of(state.full_name, state.username, state.account_id),
        )
