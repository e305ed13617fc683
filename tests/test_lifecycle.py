"""Functional tests for AdminBootstrapListener - start/stop host contract."""

from unittest.mock import MagicMock, patch

from gerrit_admin.constants import ADMIN_GROUP_ID
from gerrit_admin.errors import StoreUnavailable
from gerrit_admin.lifecycle import AdminBootstrapListener
from gerrit_admin.model import AccountGroupMember, AccountSshKey
from gerrit_admin.provisioner import AdminProvisioner
from gerrit_admin.store import SqlAccountStore


class TestStart:
    def test_provisions_admin_with_key(self, provisioner, home_with_key, db_session):
        """start() reads the key from home and provisions admin."""
        home, key = home_with_key
        result = AdminBootstrapListener(provisioner, home=home).start()

        assert result.ok
        assert result.username == "admin"
        assert result.key_added is True
        assert db_session.query(AccountSshKey).one().ssh_public_key == key
        assert db_session.query(AccountGroupMember).one().group_id == ADMIN_GROUP_ID

    def test_unset_home_passes_no_key(self, monkeypatch):
        """HOME unset -> provision called with None, no error."""
        monkeypatch.delenv("HOME", raising=False)
        provisioner = MagicMock()

        AdminBootstrapListener(provisioner).start()

        provisioner.provision.assert_called_once_with("admin", True, None)

    def test_store_failure_does_not_raise(self, tmp_path, account_cache, monkeypatch):
        """Unopenable store: start() completes normally."""
        monkeypatch.setenv("HOME", str(tmp_path))
        store = SqlAccountStore(f"sqlite:///{tmp_path / 'nope' / 'reviewdb.sqlite'}")
        listener = AdminBootstrapListener(AdminProvisioner(store, account_cache))

        result = listener.start()

        assert isinstance(result.error, StoreUnavailable)

    def test_provisioner_exception_contained(self, tmp_path):
        """Even a raising provisioner cannot break host startup."""
        provisioner = MagicMock()
        provisioner.provision.side_effect = RuntimeError("unexpected")

        assert AdminBootstrapListener(provisioner, home=str(tmp_path)).start() is None

    def test_credential_reader_exception_contained(self, provisioner):
        """Failure in the key reader is contained too."""
        with patch("gerrit_admin.lifecycle.read_public_key", side_effect=RuntimeError("io")):
            assert AdminBootstrapListener(provisioner).start() is None

    def test_custom_username_and_no_admin(self, provisioner, tmp_path, db_session):
        """Listener forwards username and make_admin."""
        listener = AdminBootstrapListener(provisioner, username="ci-bot", make_admin=False, home=str(tmp_path))
        result = listener.start()

        assert result.username == "ci-bot"
        assert result.created is True
        assert db_session.query(AccountGroupMember).count() == 0


class TestStop:
    def test_stop_is_noop(self):
        """stop() touches nothing."""
        provisioner = MagicMock()
        AdminBootstrapListener(provisioner).stop()
        provisioner.provision.assert_not_called()
