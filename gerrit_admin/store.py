"""Account store ports and the SQLAlchemy-backed review database adapter."""

import logging
from contextlib import contextmanager
from typing import Iterable, Protocol

from sqlalchemy import create_engine, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from .constants import FIRST_ACCOUNT_ID, LOGGER_NAME
from .errors import StoreUnavailable, UnexpectedStoreError
from .model import (
    Account,
    AccountExternalId,
    AccountGroupMember,
    AccountGroupMemberAudit,
    AccountSshKey,
    ReviewBase,
)

log = logging.getLogger(LOGGER_NAME)


class AccountSession(Protocol):
    """Port for one unit of work against the account store."""

    def get_external_id(self, scheme: str, key: str) -> AccountExternalId | None: ...
    def external_ids_by_account(self, account_id: int) -> list[AccountExternalId]: ...
    def search_external_ids(self, scheme: str, prefix: str, limit: int) -> list[AccountExternalId]: ...
    def next_account_id(self) -> int: ...
    def get_account(self, account_id: int) -> Account | None: ...
    def insert_accounts(self, accounts: Iterable[Account]) -> None: ...
    def insert_external_ids(self, external_ids: Iterable[AccountExternalId]) -> None: ...
    def insert_ssh_keys(self, keys: Iterable[AccountSshKey]) -> None: ...
    def group_members_by_account(self, account_id: int) -> list[AccountGroupMember]: ...
    def insert_group_members(self, members: Iterable[AccountGroupMember]) -> None: ...
    def insert_group_member_audits(self, audits: Iterable[AccountGroupMemberAudit]) -> None: ...

    def batch(self):
        """Context manager: inserts inside it commit together or not at all."""
        ...

    def close(self) -> None:
        """Release the session. Safe to call on every exit path."""
        ...


class AccountStore(Protocol):
    """Port for the host-owned account store."""

    def open(self) -> AccountSession:
        """Open a session. Raises StoreUnavailable if the store cannot be reached."""
        ...


class SqlAccountSession:
    """AccountSession over a SQLAlchemy session.

    Inserts commit on their own unless made inside batch(), which commits once
    on exit and rolls everything back on failure.
    """

    def __init__(self, db):
        self._db = db
        self._in_batch = False

    def get_external_id(self, scheme, key):
        return self._db.get(
            AccountExternalId, AccountExternalId.key_for(scheme, key), populate_existing=True
        )

    def external_ids_by_account(self, account_id):
        return self._db.query(AccountExternalId).filter(
            AccountExternalId.account_id == account_id
        ).order_by(AccountExternalId.external_id).all()

    def search_external_ids(self, scheme, prefix, limit):
        pattern = AccountExternalId.key_for(scheme, prefix)
        return self._db.query(AccountExternalId).filter(
            AccountExternalId.external_id.startswith(pattern, autoescape=True)
        ).order_by(AccountExternalId.external_id).limit(limit).all()

    def next_account_id(self):
        current = self._db.query(func.max(Account.account_id)).scalar()
        if current is None or current < FIRST_ACCOUNT_ID:
            return FIRST_ACCOUNT_ID
        return current + 1

    def get_account(self, account_id):
        return self._db.get(Account, account_id, populate_existing=True)

    def insert_accounts(self, accounts):
        self._insert(accounts, 'accounts')

    def insert_external_ids(self, external_ids):
        self._insert(external_ids, 'account_external_ids')

    def insert_ssh_keys(self, keys):
        self._insert(keys, 'account_ssh_keys')

    def group_members_by_account(self, account_id):
        return self._db.query(AccountGroupMember).filter(
            AccountGroupMember.account_id == account_id
        ).all()

    def insert_group_members(self, members):
        self._insert(members, 'account_group_members')

    def insert_group_member_audits(self, audits):
        self._insert(audits, 'account_group_members_audit')

    def _insert(self, rows, table):
        try:
            self._db.add_all(list(rows))
            if self._in_batch:
                self._db.flush()
            else:
                self._db.commit()
        except SQLAlchemyError as e:
            self._db.rollback()
            raise UnexpectedStoreError(f"insert into {table} failed: {e}") from e

    @contextmanager
    def batch(self):
        if self._in_batch:
            raise UnexpectedStoreError("batches cannot be nested")
        self._in_batch = True
        try:
            yield self
            self._db.commit()
        except SQLAlchemyError as e:
            self._db.rollback()
            raise UnexpectedStoreError(f"batch commit failed: {e}") from e
        except Exception:
            self._db.rollback()
            raise
        finally:
            self._in_batch = False

    def close(self):
        self._db.close()


class SqlAccountStore:
    """AccountStore backed by the review database.

    Usage:
        store = SqlAccountStore('sqlite:////data/reviewdb.sqlite')
        db = store.open()
        try:
            db.get_external_id('username', 'admin')
        finally:
            db.close()
    """

    def __init__(self, db_url, create_schema=False):
        self.db_url = db_url
        self.create_schema = create_schema
        self._engine = None
        self._session_factory = None

    def _get_session_factory(self):
        """Create engine and session factory on first use."""
        if self._session_factory is not None:
            return self._session_factory

        self._engine = create_engine(self.db_url)
        if self.create_schema:
            ReviewBase.metadata.create_all(self._engine)
        self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        log.info(f"[Account Store] Database initialized: {self.db_url}")
        return self._session_factory

    def open(self):
        db = None
        try:
            db = self._get_session_factory()()
            # sessions connect lazily; force it so an unreachable store fails here
            db.connection()
        except SQLAlchemyError as e:
            if db is not None:
                db.close()
            raise StoreUnavailable(f"cannot open review database {self.db_url}: {e}") from e
        return SqlAccountSession(db)

    def dispose(self):
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._session_factory = None
