"""FastAPI dependencies for dependency injection."""

from fastapi import Depends

from core.config import settings
from core.middleware.authentication import CurrentUser, authenticate_request
from core.storage.local import LocalStorage


async def require_authenticated_user(
    user: CurrentUser = Depends(authenticate_request),
) -> CurrentUser:
    """
    Require a verified token that resolves to an existing user.

    ``authenticate_request`` loads the user through the request's database
    session and caches the result in the request scope.
    """
    return user


async def require_active_user(
    current_user: CurrentUser = Depends(require_authenticated_user),
) -> CurrentUser:
    """Require user to be active (inactive accounts are refused while loading)."""
    return current_user


def get_storage() -> LocalStorage:
    """Local document storage rooted at ``UPLOAD_DIR``."""
    return LocalStorage(base_path=settings.upload_dir)
