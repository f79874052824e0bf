"""Identity of the signed-in user; tokens come from the identity provider."""
from fastapi import APIRouter

from app.api.deps import CurrentUser
from app.models.user import ROLE_LABELS
from app.rbac import ROLE_PERMISSIONS

router = APIRouter()


@router.get("/me")
async def me(user: CurrentUser):
    return {
        "id": str(user.id),
        "email": user.email,
        "display_name": user.display_name,
        "role": user.role.value,
        "role_label": ROLE_LABELS[user.role],
        "photo_url": user.photo_url,
        "permissions": ROLE_PERMISSIONS.get(user.role.value, {}),
    }
