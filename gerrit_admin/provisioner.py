"""Idempotent provisioning of the bootstrap administrator account."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from .constants import (
    ADMIN_GROUP_ID,
    FIRST_SSH_KEY_SEQ,
    LOGGER_NAME,
    SCHEME_GERRIT,
    SCHEME_USERNAME,
)
from .errors import BootstrapError, StoreUnavailable, UnexpectedStoreError
from .model import (
    Account,
    AccountExternalId,
    AccountGroupMember,
    AccountGroupMemberAudit,
    AccountSshKey,
)

log = logging.getLogger(LOGGER_NAME)


@dataclass
class ProvisionResult:
    username: str
    account_id: int | None = None
    created: bool = False
    key_added: bool = False
    promoted: bool = False
    error: BootstrapError | None = None

    @property
    def ok(self):
        return self.error is None


class AdminProvisioner:
    """Ensure an account exists for a username, optionally with admin membership.

    Usage:
        provisioner = AdminProvisioner(store, account_cache)
        result = provisioner.provision('admin', make_admin=True, public_key=key)

    Never raises: failures are logged and returned in ProvisionResult.error.
    Concurrent runs for the same username are not guarded against and may
    insert duplicate rows.
    """

    def __init__(self, store, account_cache, admin_group_id=ADMIN_GROUP_ID):
        self._store = store
        self._account_cache = account_cache
        self.admin_group_id = admin_group_id

    def provision(self, username, make_admin, public_key=None):
        result = ProvisionResult(username=username)

        try:
            db = self._store.open()
        except StoreUnavailable as e:
            log.error(f"[Admin Bootstrap] Account store unavailable: {e}")
            result.error = e
            return result
        except Exception as e:
            log.error(f"[Admin Bootstrap] Account store unavailable: {e}", exc_info=True)
            result.error = StoreUnavailable(str(e))
            return result

        try:
            self._ensure_account(db, username, public_key, result)
            if make_admin:
                self._ensure_admin(db, username, result)
        except Exception as e:
            log.error(f"[Admin Bootstrap] Provisioning {username} failed: {e}", exc_info=True)
            if isinstance(e, UnexpectedStoreError):
                result.error = e
            else:
                result.error = UnexpectedStoreError(f"provisioning {username} failed: {e}")
        finally:
            db.close()

        return result

    def _ensure_account(self, db, username, public_key, result):
        existing = db.get_external_id(SCHEME_USERNAME, username)
        if existing is not None:
            log.info(f"[Admin Bootstrap] {username} account found")
            result.account_id = existing.account_id
            return

        log.info(f"[Admin Bootstrap] {username} account not found, creating")
        account_id = db.next_account_id()
        account = Account(
            account_id=account_id,
            full_name=username,
            registered_on=datetime.now(timezone.utc),
        )
        log.info(f"[Admin Bootstrap] New account id for {username}: {account_id}")

        # account does not exist until all of its rows are committed together
        with db.batch():
            db.insert_accounts([account])
            db.insert_external_ids([
                AccountExternalId.create(account_id, SCHEME_USERNAME, username),
                AccountExternalId.create(account_id, SCHEME_GERRIT, username),
            ])
            if public_key is not None:
                db.insert_ssh_keys([AccountSshKey(
                    account_id=account_id,
                    seq=FIRST_SSH_KEY_SEQ,
                    ssh_public_key=public_key,
                    valid=True,
                )])

        result.account_id = account_id
        result.created = True
        if public_key is not None:
            result.key_added = True
            log.info(f"[Admin Bootstrap] Public key inserted for {username}")

    def _ensure_admin(self, db, username, result):
        # Re-read from the database; the session lookups bypass its identity map
        ext_id = db.get_external_id(SCHEME_USERNAME, username)
        if ext_id is None:
            raise UnexpectedStoreError(f"external id for {username} missing after provisioning")
        account = db.get_account(ext_id.account_id)
        if account is None:
            raise UnexpectedStoreError(f"account {ext_id.account_id} for {username} missing")

        group_ids = {m.group_id for m in db.group_members_by_account(account.account_id)}
        if self.admin_group_id in group_ids:
            log.info(f"[Admin Bootstrap] {username} already in Administrators")
            return

        log.info(f"[Admin Bootstrap] Adding {username} to Administrators")
        member = AccountGroupMember(account_id=account.account_id, group_id=self.admin_group_id)
        with db.batch():
            db.insert_group_member_audits([AccountGroupMemberAudit(
                account_id=account.account_id,
                group_id=self.admin_group_id,
                added_by=account.account_id,
                added_on=datetime.now(timezone.utc),
            )])
            db.insert_group_members([member])
        self._account_cache.evict(account.account_id)
        result.promoted = True
        log.info(f"[Admin Bootstrap] {username} added to Administrators")
