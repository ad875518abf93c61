"""Services package."""

from user_service.services.users import (
    PAGE_SIZE,
    create_user,
    delete_user,
    get_user,
    get_user_by_email,
    list_users,
    update_user,
)

__all__ = [
    "PAGE_SIZE",
    "create_user",
    "delete_user",
    "get_user",
    "get_user_by_email",
    "list_users",
    "update_user",
]
