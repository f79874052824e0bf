"""RBAC module/action registry and per-role permissions."""
from __future__ import annotations

from typing import Literal

PermissionAction = Literal["view", "add", "edit", "delete"]

ACTION_BY_METHOD: dict[str, PermissionAction] = {
    "GET": "view",
    "HEAD": "view",
    "OPTIONS": "view",
    "POST": "add",
    "PUT": "edit",
    "PATCH": "edit",
    "DELETE": "delete",
}

SYSTEM_MODULES: list[dict[str, str]] = [
    {"key": "dashboard", "name": "Dashboard"},
    {"key": "campuses", "name": "Recintos"},
    {"key": "schools", "name": "Escuelas"},
    {"key": "programs", "name": "Carreras"},
    {"key": "groups", "name": "Grupos"},
    {"key": "students", "name": "Estudiantes"},
    {"key": "users", "name": "Usuarios"},
    {"key": "attendance", "name": "Asistencia"},
    {"key": "justifications", "name": "Justificaciones"},
    {"key": "reports", "name": "Reportes"},
]


def _full_permissions() -> dict[str, bool]:
    return {"view": True, "add": True, "edit": True, "delete": True}


def _view_only() -> dict[str, bool]:
    return {"view": True, "add": False, "edit": False, "delete": False}


def _module_defaults(fill: dict[str, bool]) -> dict[str, dict[str, bool]]:
    return {module["key"]: dict(fill) for module in SYSTEM_MODULES}


_NONE = {"view": False, "add": False, "edit": False, "delete": False}

ROLE_PERMISSIONS: dict[str, dict[str, dict[str, bool]]] = {
    "admin": _module_defaults(_full_permissions()),
    "teacher": {
        **_module_defaults(_NONE),
        "dashboard": _view_only(),
        "attendance": {"view": True, "add": True, "edit": True, "delete": False},
        "justifications": {"view": True, "add": True, "edit": False, "delete": True},
    },
    "area_manager": {
        **_module_defaults(_NONE),
        "dashboard": _view_only(),
        "reports": _view_only(),
        "justifications": {"view": True, "add": False, "edit": True, "delete": False},
    },
}


def has_permission(role: str | None, module: str, action: str) -> bool:
    if not role:
        return False
    permission = ROLE_PERMISSIONS.get(role, {}).get(module)
    if not permission:
        return False
    return bool(permission.get(action, False))
