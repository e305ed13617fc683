"""Well-known identifiers shared with the review server."""

# External id schemes; a username is bound under both so either lookup
# resolves to the same account
SCHEME_USERNAME = 'username'
SCHEME_GERRIT = 'gerrit'

ADMIN_USERNAME = 'admin'

# Administrators group, matched by id only
ADMIN_GROUP_ID = 1

FIRST_ACCOUNT_ID = 1000000
FIRST_SSH_KEY_SEQ = 1

LOGGER_NAME = 'gerrit.plugins.gerrit_admin'
