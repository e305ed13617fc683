"""Error kinds raised while bootstrapping the administrator account."""


class BootstrapError(Exception):
    """Base class for admin bootstrap failures."""


class StoreUnavailable(BootstrapError):
    """The account store session could not be opened."""


class CredentialUnreadable(BootstrapError):
    """The public key file is missing, unreadable or HOME is unset."""


class UnexpectedStoreError(BootstrapError):
    """A lookup or insert failed after the session was opened."""
