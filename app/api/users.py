"""User administration: teachers, admins and area managers."""
from datetime import datetime

from fastapi import APIRouter, HTTPException

from app.api.common import get_or_404, matches
from app.api.deps import AdminOnly
from app.models.user import ROLE_LABELS, User, UserCreate, UserRole, UserUpdate
from app.services.snapshot import cache

router = APIRouter()


def serialize_user(u: User) -> dict:
    return {
        "id": str(u.id),
        "email": u.email,
        "display_name": u.display_name,
        "role": u.role.value,
        "role_label": ROLE_LABELS[u.role],
        "photo_url": u.photo_url,
        "is_active": u.is_active,
        "created_at": u.created_at.isoformat() if u.created_at else None,
    }


@router.get("/")
async def list_users(admin: AdminOnly, role: UserRole | None = None, q: str | None = None):
    query = {"role": role.value} if role else {}
    users = await User.find(query).sort("display_name").to_list()
    return [
        serialize_user(u)
        for u in users
        if matches(q, u.display_name, u.email, ROLE_LABELS[u.role])
    ]


@router.post("/", status_code=201)
async def create_user(data: UserCreate, admin: AdminOnly):
    existing = await User.find_one(User.email == data.email)
    if existing:
        raise HTTPException(status_code=400, detail="Email already registered")
    u = User(
        email=data.email,
        display_name=data.display_name.strip(),
        role=data.role,
        is_active=data.is_active,
    )
    await u.insert()
    cache.invalidate("users")
    return serialize_user(u)


@router.get("/{user_id}")
async def get_user(user_id: str, admin: AdminOnly):
    return serialize_user(await get_or_404(User, user_id, "User"))


@router.patch("/{user_id}")
async def update_user(user_id: str, data: UserUpdate, admin: AdminOnly):
    u = await get_or_404(User, user_id, "User")
    update = data.model_dump(exclude_unset=True)
    if "email" in update and update["email"] != u.email:
        existing = await User.find_one(User.email == update["email"])
        if existing:
            raise HTTPException(status_code=400, detail="Email already registered")
    if str(u.id) == str(admin.id) and (
        update.get("role", u.role) != UserRole.ADMIN or update.get("is_active") is False
    ):
        raise HTTPException(status_code=400, detail="You cannot demote or deactivate yourself")
    for key, value in update.items():
        setattr(u, key, value)
    u.updated_at = datetime.utcnow()
    await u.save()
    cache.invalidate("users")
    return serialize_user(u)


@router.delete("/{user_id}", status_code=204)
async def delete_user(user_id: str, admin: AdminOnly):
    """Hard delete; groups taught by this user keep a dangling teacher id."""
    u = await get_or_404(User, user_id, "User")
    if str(u.id) == str(admin.id):
        raise HTTPException(status_code=400, detail="You cannot delete yourself")
    await u.delete()
    cache.invalidate("users")
