"""Authentication helpers.

Deliberately lightweight:

- Users table (email + bcrypt password hash)
- Stateless JWT access tokens sent as `Authorization: Bearer <token>`

Logout is client-side only; tokens stay valid until they expire.
"""

from .deps import get_current_user
from .crud import create_user, get_user_by_id, verify_user_credentials

__all__ = [
    "get_current_user",
    "create_user",
    "get_user_by_id",
    "verify_user_credentials",
]
