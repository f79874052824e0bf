import pytest

from app.rbac import ACTION_BY_METHOD, ROLE_PERMISSIONS, SYSTEM_MODULES, has_permission


def test_admin_has_every_permission():
    for module in SYSTEM_MODULES:
        for action in ("view", "add", "edit", "delete"):
            assert has_permission("admin", module["key"], action)


@pytest.mark.parametrize(
    "module, action, allowed",
    [
        ("attendance", "add", True),
        ("attendance", "delete", False),
        ("justifications", "add", True),
        ("justifications", "delete", True),
        ("justifications", "edit", False),
        ("reports", "view", False),
        ("students", "view", False),
        ("dashboard", "view", True),
    ],
)
def test_teacher_permissions(module, action, allowed):
    assert has_permission("teacher", module, action) is allowed


@pytest.mark.parametrize(
    "module, action, allowed",
    [
        ("reports", "view", True),
        ("justifications", "edit", True),
        ("justifications", "add", False),
        ("attendance", "add", False),
        ("users", "view", False),
    ],
)
def test_area_manager_permissions(module, action, allowed):
    assert has_permission("area_manager", module, action) is allowed


def test_unknown_role_or_module_is_denied():
    assert not has_permission(None, "reports", "view")
    assert not has_permission("guest", "reports", "view")
    assert not has_permission("admin", "billing", "view")


def test_every_role_covers_every_module():
    keys = {m["key"] for m in SYSTEM_MODULES}
    for permissions in ROLE_PERMISSIONS.values():
        assert set(permissions) == keys


def test_http_methods_map_to_actions():
    assert ACTION_BY_METHOD["GET"] == "view"
    assert ACTION_BY_METHOD["POST"] == "add"
    assert ACTION_BY_METHOD["PATCH"] == "edit"
    assert ACTION_BY_METHOD["DELETE"] == "delete"
