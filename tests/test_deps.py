import asyncio

from app.api import deps
from app.config import settings
from app.models.user import User, UserRole


class FakeCache:
    def __init__(self):
        self.invalidated = []

    def invalidate(self, *names):
        self.invalidated.extend(names)


def _stub_users(monkeypatch, stored):
    """Serve ``find_one`` from ``stored`` and record writes."""
    writes = []

    async def find_one(query):
        (field, value), = query.items()
        return next((u for u in stored if getattr(u, field) == value), None)

    async def insert(self):
        writes.append(("insert", self.email))
        return self

    async def save(self):
        writes.append(("save", self.email))
        return self

    monkeypatch.setattr(User, "find_one", find_one)
    monkeypatch.setattr(User, "insert", insert)
    monkeypatch.setattr(User, "save", save)
    return writes


def test_known_subject_needs_no_write(monkeypatch):
    cache = FakeCache()
    monkeypatch.setattr(deps, "cache", cache)
    known = User(email="t1@uni.edu", display_name="Prof. Torres", role=UserRole.TEACHER, external_id="sub-1")
    writes = _stub_users(monkeypatch, [known])

    user = asyncio.run(deps.resolve_user({"sub": "sub-1", "email": "t1@uni.edu"}))

    assert user is known
    assert writes == []
    assert cache.invalidated == []


def test_linking_by_email_invalidates_users(monkeypatch):
    cache = FakeCache()
    monkeypatch.setattr(deps, "cache", cache)
    existing = User(email="t1@uni.edu", display_name="Prof. Torres", role=UserRole.TEACHER)
    writes = _stub_users(monkeypatch, [existing])

    user = asyncio.run(deps.resolve_user({"sub": "sub-1", "email": "t1@uni.edu"}))

    assert user.external_id == "sub-1"
    assert writes == [("save", "t1@uni.edu")]
    assert cache.invalidated == ["users"]


def test_first_sign_in_provisions_teacher_and_invalidates_users(monkeypatch):
    cache = FakeCache()
    monkeypatch.setattr(deps, "cache", cache)
    monkeypatch.setattr(settings, "auto_provision_users", True)
    writes = _stub_users(monkeypatch, [])

    user = asyncio.run(
        deps.resolve_user({"sub": "sub-9", "email": "new@uni.edu", "name": "Prof. Nueva"})
    )

    assert user.role == UserRole.TEACHER
    assert user.display_name == "Prof. Nueva"
    assert writes == [("insert", "new@uni.edu")]
    assert cache.invalidated == ["users"]


def test_unknown_user_without_provisioning(monkeypatch):
    cache = FakeCache()
    monkeypatch.setattr(deps, "cache", cache)
    monkeypatch.setattr(settings, "auto_provision_users", False)
    writes = _stub_users(monkeypatch, [])

    assert asyncio.run(deps.resolve_user({"sub": "sub-9", "email": "new@uni.edu"})) is None
    assert writes == []
    assert cache.invalidated == []
