"""Review database ORM models - the subset of the host schema this plugin touches."""

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, Index
from sqlalchemy.orm import declarative_base

ReviewBase = declarative_base()


class Account(ReviewBase):
    """A user account. Ids come from the store's account sequence."""
    __tablename__ = 'accounts'

    account_id = Column(Integer, primary_key=True, autoincrement=False)
    full_name = Column(String(255), nullable=True)
    preferred_email = Column(String(255), nullable=True)
    registered_on = Column(DateTime, nullable=False)
    inactive = Column(Boolean, default=False, nullable=False)


class AccountExternalId(ReviewBase):
    """Binding of "<scheme>:<key>" to exactly one account."""
    __tablename__ = 'account_external_ids'

    external_id = Column(String(255), primary_key=True)
    account_id = Column(Integer, nullable=False, index=True)
    email_address = Column(String(255), nullable=True)
    password = Column(String(255), nullable=True)

    @staticmethod
    def key_for(scheme, key):
        return f'{scheme}:{key}'

    @classmethod
    def create(cls, account_id, scheme, key):
        return cls(external_id=cls.key_for(scheme, key), account_id=account_id)

    @property
    def scheme(self):
        return self.external_id.split(':', 1)[0]

    @property
    def key(self):
        return self.external_id.split(':', 1)[1]


class AccountSshKey(ReviewBase):
    """SSH public key attached to an account, numbered from 1."""
    __tablename__ = 'account_ssh_keys'

    account_id = Column(Integer, primary_key=True, autoincrement=False)
    seq = Column(Integer, primary_key=True, autoincrement=False)
    ssh_public_key = Column(Text, nullable=False)
    valid = Column(Boolean, default=True, nullable=False)


class AccountGroupMember(ReviewBase):
    """Membership of an account in a group."""
    __tablename__ = 'account_group_members'

    account_id = Column(Integer, primary_key=True, autoincrement=False)
    group_id = Column(Integer, primary_key=True, autoincrement=False)


class AccountGroupMemberAudit(ReviewBase):
    """Who added an account to a group, and when."""
    __tablename__ = 'account_group_members_audit'

    account_id = Column(Integer, primary_key=True, autoincrement=False)
    group_id = Column(Integer, primary_key=True, autoincrement=False)
    added_on = Column(DateTime, primary_key=True)
    added_by = Column(Integer, nullable=False)
    removed_by = Column(Integer, nullable=True)
    removed_on = Column(DateTime, nullable=True)

    __table_args__ = (
        Index('ix_group_members_audit_group', 'group_id'),
    )
