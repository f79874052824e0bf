"""Shared dependencies: identity-provider token checks, role checks and permissions."""
import logging
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

from app.config import settings
from app.models.user import User, UserRole
from app.rbac import ACTION_BY_METHOD, PermissionAction, has_permission
from app.services.snapshot import cache

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def decode_token(token: str) -> dict:
    """Verify a bearer token issued by the identity provider."""
    options = {"verify_aud": bool(settings.jwt_audience)}
    kwargs = {}
    if settings.jwt_audience:
        kwargs["audience"] = settings.jwt_audience
    if settings.jwt_issuer:
        kwargs["issuer"] = settings.jwt_issuer
    return jwt.decode(
        token,
        settings.jwt_secret_key,
        algorithms=[settings.jwt_algorithm],
        options=options,
        **kwargs,
    )


async def resolve_user(claims: dict) -> Optional[User]:
    """Map token claims to a user, linking or provisioning on first sign-in."""
    subject = claims.get("sub")
    user = await User.find_one({"external_id": subject})
    if user:
        return user

    email = claims.get("email")
    if not email:
        return None
    user = await User.find_one({"email": email})
    if user:
        user.external_id = subject
        await user.save()
        cache.invalidate("users")
        return user

    if not settings.auto_provision_users:
        return None
    user = User(
        email=email,
        display_name=claims.get("name") or "Usuario",
        role=UserRole.TEACHER,
        photo_url=claims.get("picture"),
        external_id=subject,
    )
    await user.insert()
    cache.invalidate("users")
    logger.info("Provisioned user %s on first sign-in", email)
    return user


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> User:
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        claims = decode_token(credentials.credentials)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    if not claims.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid token")
    user = await resolve_user(claims)
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="User not found or inactive")
    return user


def require_roles(*allowed: UserRole):
    allowed_values = [role.value for role in allowed]

    async def checker(user: Annotated[User, Depends(get_current_user)]):
        if user.role.value not in allowed_values:
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return user

    return checker


def require_permission(module: str, action: PermissionAction):
    async def checker(user: Annotated[User, Depends(get_current_user)]):
        if not has_permission(user.role.value, module, action):
            raise HTTPException(status_code=403, detail=f"Missing {module}.{action} permission")
        return user

    return checker


def require_module_permission(module: str):
    async def checker(request: Request, user: Annotated[User, Depends(get_current_user)]):
        method = request.method.upper()
        action = ACTION_BY_METHOD.get(method)
        if not action:
            raise HTTPException(status_code=405, detail=f"Unsupported method for permission check: {method}")
        if not has_permission(user.role.value, module, action):
            raise HTTPException(status_code=403, detail=f"Missing {module}.{action} permission")
        return user

    return checker


def is_admin(user: User) -> bool:
    return user.role == UserRole.ADMIN


# Type aliases for route injection
CurrentUser = Annotated[User, Depends(get_current_user)]
AdminOnly = Annotated[User, Depends(require_roles(UserRole.ADMIN))]
TeacherOrAdmin = Annotated[User, Depends(require_roles(UserRole.TEACHER, UserRole.ADMIN))]
ManagerOrAdmin = Annotated[User, Depends(require_roles(UserRole.AREA_MANAGER, UserRole.ADMIN))]
