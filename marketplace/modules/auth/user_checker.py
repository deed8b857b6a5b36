"""Account-status checks run around authentication."""

from marketplace.exceptions import AccountStatusException
from marketplace.models.user import User
from marketplace.modules.auth.constants import ACCOUNT_DEACTIVATED_MESSAGE, ACCOUNT_NOT_ACTIVE_MESSAGE


def check_pre_auth(user: User) -> None:
    """Reject inactive accounts before their credentials are checked."""
    if not user.is_active:
        raise AccountStatusException(ACCOUNT_NOT_ACTIVE_MESSAGE)


def check_post_auth(user: User) -> None:
    """Reject tokens belonging to accounts deactivated since login."""
    if not user.is_active:
        raise AccountStatusException(ACCOUNT_DEACTIVATED_MESSAGE)
