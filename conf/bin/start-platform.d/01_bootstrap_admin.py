#!/usr/bin/env python3
"""
Ensure the administrator account exists before the review server starts.
Runs the plugin's lifecycle listeners against the review database named by
GERRIT_ADMIN_DB_URL. Never fails the platform start: errors are logged only.
"""

import logging
import os

from gerrit_admin import SqlAccountStore, get_listeners_and_backends
from gerrit_admin.constants import ADMIN_USERNAME, LOGGER_NAME

log = logging.getLogger(LOGGER_NAME)


def bootstrap_admin():
    """Provision the admin account. Returns the listeners' ProvisionResults."""
    db_url = os.environ.get('GERRIT_ADMIN_DB_URL', 'sqlite:////data/reviewdb.sqlite')
    username = os.environ.get('GERRIT_ADMIN_USERNAME', ADMIN_USERNAME)
    store = SqlAccountStore(db_url)

    listeners, backends = get_listeners_and_backends(store, username=username)
    log.info(f"[Admin Bootstrap] Registered {len(listeners)} listener(s), {len(backends)} group backend(s)")
    try:
        results = [listener.start() for listener in listeners]
        for listener in listeners:
            listener.stop()
    finally:
        store.dispose()
    log.info("[Admin Bootstrap] Admin bootstrap complete")
    return results


if __name__ == '__main__':
    logging.basicConfig(
        level=logging.INFO,
        format='[%(levelname)1.1s %(asctime)s.%(msecs)03d %(name)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )
    bootstrap_admin()
