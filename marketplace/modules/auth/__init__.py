"""Auth module — JWT login, registration, account status and profile."""

from marketplace.modules.auth.auth import (
    create_access_token,
    get_current_user,
    get_optional_user,
    require_buyer,
    require_merchant,
    require_role,
)
from marketplace.modules.auth.user_checker import check_post_auth, check_pre_auth

__all__ = [
    "create_access_token",
    "get_current_user",
    "get_optional_user",
    "require_role",
    "require_merchant",
    "require_buyer",
    "check_pre_auth",
    "check_post_auth",
]
