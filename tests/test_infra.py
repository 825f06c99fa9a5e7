import logging

import pytest

from vocalkart.core.logging import configure_logging
from vocalkart.db import mongo
from vocalkart.domain.repositories.off_cache_repo import OffCacheRepo


class StubRedis:
    def __init__(self, value):
        self.value = value

    async def get(self, key):
        return self.value


@pytest.mark.asyncio
async def test_corrupt_cache_entry_is_a_miss():
    cache = OffCacheRepo(StubRedis("{not json"))
    assert await cache.get("8901") is None


@pytest.mark.asyncio
async def test_cached_miss_and_hit():
    assert await OffCacheRepo(StubRedis("{}")).get("1") == {}
    assert await OffCacheRepo(StubRedis('{"code": "1"}')).get("1") == {"code": "1"}


class _FailingCollection:
    async def create_index(self, *args, **kwargs):
        raise RuntimeError("index build refused")


class _Db:
    def __getitem__(self, name):
        return _FailingCollection()


class _Admin:
    async def command(self, name):
        return {"ok": 1}


class _Client:
    def __init__(self, *args, **kwargs):
        self.admin = _Admin()

    def __getitem__(self, name):
        return _Db()

    def close(self):
        pass


@pytest.mark.asyncio
async def test_index_failure_is_reported_as_index_failure(monkeypatch, caplog):
    monkeypatch.setattr(mongo, "AsyncIOMotorClient", _Client)
    with caplog.at_level(logging.INFO, logger="vocalkart.db.mongo"):
        await mongo.connect()
    try:
        assert "index creation failed" in caplog.text
        assert "ping at startup failed" not in caplog.text
        assert mongo.get_db() is not None
    finally:
        await mongo.disconnect()


def test_configure_logging_levels():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging(logging.DEBUG)
        assert logging.getLogger("vocalkart").level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("motor").level == logging.WARNING
        assert len(root.handlers) == 1
    finally:
        root.handlers = saved_handlers
        root.setLevel(saved_level)
