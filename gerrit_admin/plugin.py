"""Plugin wiring: the lifecycle listeners and group backends the host registers."""

from .account_cache import AccountCache
from .constants import ADMIN_USERNAME
from .group_backend import SingleUserGroupBackend
from .lifecycle import AdminBootstrapListener
from .provisioner import AdminProvisioner


def get_listeners_and_backends(store, account_cache=None, username=ADMIN_USERNAME):
    """Build listeners and group backends. Returns (listeners, backends).

    Args:
        store: AccountStore for the review database
        account_cache: shared AccountCache (a new one is built when None)
        username: account provisioned as administrator on start()

    The listener and the backend share the account cache, so admin promotion
    is visible to membership checks immediately.
    """
    if account_cache is None:
        account_cache = AccountCache(store)

    provisioner = AdminProvisioner(store, account_cache)
    listeners = [AdminBootstrapListener(provisioner, username=username, make_admin=True)]
    backends = [SingleUserGroupBackend(store, account_cache)]
    return listeners, backends
