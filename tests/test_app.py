import asyncio

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from app import main
from app.api import reports


def test_startup_fails_clearly_when_mongodb_is_down(monkeypatch):
    async def unreachable():
        raise ServerSelectionTimeoutError("No servers found")

    monkeypatch.setattr(main, "db_startup", unreachable)

    async def run():
        async with main.lifespan(main.app):
            pass

    with pytest.raises(RuntimeError, match="MONGODB_URL") as exc_info:
        asyncio.run(run())
    assert "docker" not in str(exc_info.value)


def test_group_report_reads_range_query_parameter():
    route = next(r for r in reports.router.routes if r.path == "/groups")
    params = {p.name: p for p in route.dependant.query_params}

    assert "date_range" in params
    assert params["date_range"].field_info.alias == "range"
    assert params["date_range"].field_info.default == "week"
