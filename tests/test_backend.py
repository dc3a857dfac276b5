import re

import pytest

from backend import Connection, HostBinding, Phase, PlayerBinding, Role, Room, RoomRegistry
from tests.fakes import FakeWebSocket, ScriptedRandom


def test_generated_codes_are_four_uppercase_letters_and_distinct(registry):
    codes = [registry.create(Connection(FakeWebSocket())) for _ in range(200)]

    assert len(set(codes)) == 200
    assert all(re.fullmatch(r"[A-Z]{4}", code) for code in codes)
    assert len(registry) == 200


def test_generate_code_redraws_on_collision():
    registry = RoomRegistry(rng=ScriptedRandom(["ABCD", "ABCD", "ABCD", "WXYZ"]))
    assert registry.create(Connection(FakeWebSocket())) == "ABCD"

    assert registry.generate_code() == "WXYZ"


def test_create_binds_host_and_opens_room(registry):
    host = Connection(FakeWebSocket())
    code = registry.create(host)

    room = registry.get(code)
    assert room.host is host
    assert room.players == []
    assert room.phase is Phase.OPEN
    assert host.role is Role.HOST
    assert host.room_code == code
    assert host.display_name is None
    assert host.player_index is None


def test_get_is_case_sensitive(registry):
    code = registry.create(Connection(FakeWebSocket()))

    assert registry.get(code.lower()) is None
    assert registry.get(code) is not None


def test_remove_is_idempotent(registry):
    code = registry.create(Connection(FakeWebSocket()))

    registry.remove(code)
    registry.remove(code)

    assert code not in registry
    assert registry.get(code) is None


def test_connection_binds_only_once():
    connection = Connection(FakeWebSocket())
    assert connection.role is Role.UNBOUND
    connection.bind(HostBinding(room_code="ABCD"))

    with pytest.raises(RuntimeError):
        connection.bind(PlayerBinding(room_code="ABCD", name="ALICE", player_index=0))
    assert connection.role is Role.HOST


def test_room_find_and_remove_player_by_identity():
    host = Connection(FakeWebSocket())
    first = Connection(FakeWebSocket())
    first.bind(PlayerBinding(room_code="ABCD", name="ALICE", player_index=0))
    impostor = Connection(FakeWebSocket())
    impostor.bind(PlayerBinding(room_code="ABCD", name="ALICE", player_index=0))
    room = Room(code="ABCD", host=host, players=[first])

    assert room.find_player("alice") is first
    assert room.remove_player(impostor) is False
    assert room.players == [first]
    assert room.remove_player(first) is True
    assert room.find_player("ALICE") is None


def test_room_starts_only_once():
    room = Room(code="ABCD", host=Connection(FakeWebSocket()))

    assert room.start() is True
    assert room.start() is False
    assert room.phase is Phase.IN_PROGRESS


async def test_send_skips_sockets_that_are_not_open():
    websocket = FakeWebSocket()
    connection = Connection(websocket)
    await connection.close()

    await connection.send_text("hello")

    assert websocket.sent == []
