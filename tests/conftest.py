import json
import random

import pytest

from backend import RoomRegistry
from lifecycle import ConnectionLifecycleManager
from relay import MessageRouter
from tests.fakes import FakeWebSocket


@pytest.fixture
def registry():
    return RoomRegistry(rng=random.Random(1234))


@pytest.fixture
def router(registry):
    return MessageRouter(registry)


@pytest.fixture
def lifecycle(registry):
    return ConnectionLifecycleManager(registry)


@pytest.fixture
def connect(lifecycle):
    def _connect():
        return lifecycle.on_connect(FakeWebSocket())
    return _connect


@pytest.fixture
def open_room(router, connect):
    """Create a room and return (host, code)."""
    async def _open_room():
        host = connect()
        await router.handle(host, json.dumps({"type": "create_room"}))
        return host, host.websocket.last()["code"]
    return _open_room


@pytest.fixture
def join(router, connect):
    """Join a fresh connection to `code` under `name` and return it."""
    async def _join(code, name, picture=None):
        player = connect()
        await router.handle(player, json.dumps({"type": "join_room", "code": code, "name": name, "picture": picture}))
        return player
    return _join
