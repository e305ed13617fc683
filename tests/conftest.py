"""Shared fixtures for gerrit_admin functional tests."""

import os
from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from gerrit_admin.account_cache import AccountCache
from gerrit_admin.model import Account, AccountExternalId, ReviewBase
from gerrit_admin.provisioner import AdminProvisioner
from gerrit_admin.store import SqlAccountStore


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Strip GERRIT_ADMIN_* env vars for test isolation."""
    for key in list(os.environ):
        if key.startswith("GERRIT_ADMIN_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def db_url(tmp_path):
    """File-backed SQLite review database with the schema created."""
    url = f"sqlite:///{tmp_path / 'reviewdb.sqlite'}"
    engine = create_engine(url)
    ReviewBase.metadata.create_all(engine)
    engine.dispose()
    return url


@pytest.fixture
def store(db_url):
    store = SqlAccountStore(db_url)
    yield store
    store.dispose()


@pytest.fixture
def db_session(db_url):
    """Plain SQLAlchemy session for asserting on rows."""
    engine = create_engine(db_url)
    session = sessionmaker(bind=engine)()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def account_cache(store):
    return AccountCache(store)


@pytest.fixture
def provisioner(store, account_cache):
    return AdminProvisioner(store, account_cache)


@pytest.fixture
def add_account(db_session):
    """Insert an existing account bound to a username. Returns its id."""
    def _add(username, account_id, full_name=None):
        db_session.add(Account(
            account_id=account_id,
            full_name=full_name if full_name is not None else username,
            registered_on=datetime.now(timezone.utc),
        ))
        db_session.add(AccountExternalId.create(account_id, "username", username))
        db_session.add(AccountExternalId.create(account_id, "gerrit", username))
        db_session.commit()
        return account_id
    return _add


@pytest.fixture
def home_with_key(tmp_path):
    """HOME directory holding .ssh/id_rsa.pub. Returns (home, key)."""
    key = "ssh-rsa AAAAB3NzaC1yc2EAAAADAQABAAABAQC admin@review"
    ssh_dir = tmp_path / "home" / ".ssh"
    ssh_dir.mkdir(parents=True)
    (ssh_dir / "id_rsa.pub").write_text(key + "\n", encoding="utf-8")
    return str(tmp_path / "home"), key
