"""Administrator bootstrap plugin for the review server."""

__version__ = "1.0.0"

from .account_cache import AccountCache, AccountState
from .errors import BootstrapError, CredentialUnreadable, StoreUnavailable, UnexpectedStoreError
from .group_backend import GroupReference, SingleUserGroupBackend
from .lifecycle import AdminBootstrapListener
from .plugin import get_listeners_and_backends
from .provisioner import AdminProvisioner, ProvisionResult
from .store import SqlAccountStore

__all__ = [
    "AccountCache",
    "AccountState",
    "AdminBootstrapListener",
    "AdminProvisioner",
    "BootstrapError",
    "CredentialUnreadable",
    "GroupReference",
    "ProvisionResult",
    "SingleUserGroupBackend",
    "SqlAccountStore",
    "StoreUnavailable",
    "UnexpectedStoreError",
    "get_listeners_and_backends",
]
