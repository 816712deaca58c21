# Authentication module

from app.modules.auth.actor import Actor
from app.modules.auth.dependencies import (
    get_current_user,
    get_current_actor,
    get_current_admin,
)

__all__ = [
    "Actor",
    "get_current_user",
    "get_current_actor",
    "get_current_admin",
]
