"""Administrator SSH public key lookup."""

import logging
import os

from .constants import LOGGER_NAME
from .errors import CredentialUnreadable

log = logging.getLogger(LOGGER_NAME)

PUBLIC_KEY_RELPATH = os.path.join('.ssh', 'id_rsa.pub')


def public_key_path(home=None):
    """Return <home>/.ssh/id_rsa.pub, falling back to $HOME."""
    if home is None:
        home = os.environ.get('HOME')
    if not home:
        raise CredentialUnreadable("HOME is not set")
    return os.path.join(home, PUBLIC_KEY_RELPATH)


def load_public_key(home=None):
    """Read the public key as UTF-8 text. Raises CredentialUnreadable."""
    path = public_key_path(home)
    log.info(f"[Admin Bootstrap] Public key path: {path}")
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return f.read().strip()
    except (OSError, UnicodeDecodeError) as e:
        raise CredentialUnreadable(f"cannot read {path}: {e}") from e


def read_public_key(home=None):
    """Return the public key, or None when absent, unreadable or blank."""
    try:
        key = load_public_key(home)
    except CredentialUnreadable as e:
        log.info(f"[Admin Bootstrap] Public key not found: {e}")
        return None
    return key or None
