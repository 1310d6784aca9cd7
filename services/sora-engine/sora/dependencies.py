"""Request-scoped dependencies shared by the routers."""

from fastapi import Header, HTTPException

from sora.config import get_settings
from sora.services.file_storage import LocalFileStorage, get_file_storage
from sora.services.study_store import Principal


def get_principal(
    x_user_id: str | None = Header(None),
    x_user_role: str | None = Header(None),
) -> Principal:
    """Identity set by the upstream auth gateway."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return Principal(user_id=x_user_id, is_admin=x_user_role == get_settings().admin_role)


def get_storage() -> LocalFileStorage:
    return get_file_storage()
