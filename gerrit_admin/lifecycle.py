"""Lifecycle listener that bootstraps the administrator when the server starts."""

import logging

from .constants import ADMIN_USERNAME, LOGGER_NAME
from .credentials import read_public_key

log = logging.getLogger(LOGGER_NAME)


class AdminBootstrapListener:
    """Host lifecycle listener: start() provisions the admin, stop() does nothing.

    The host blocks on start() before serving, so nothing may escape it.
    """

    def __init__(self, provisioner, username=ADMIN_USERNAME, make_admin=True, home=None):
        self.provisioner = provisioner
        self.username = username
        self.make_admin = make_admin
        self.home = home

    def start(self):
        try:
            public_key = read_public_key(self.home)
            result = self.provisioner.provision(self.username, self.make_admin, public_key)
        except Exception as e:
            log.error(f"[Admin Bootstrap] Startup provisioning failed: {e}", exc_info=True)
            return None

        if result.ok:
            log.info(
                f"[Admin Bootstrap] Done: user={result.username}, account={result.account_id}, "
                f"created={result.created}, key_added={result.key_added}, promoted={result.promoted}"
            )
        return result

    def stop(self):
        pass
