import asyncio
import json

from pydantic import ValidationError

from backend import Connection, PlayerBinding, Role, RoomRegistry, normalize_name
from constants import (
    ERROR_ALREADY_IN_ROOM,
    ERROR_INVALID_JOIN,
    ERROR_NAME_TAKEN,
    ERROR_ROOM_NOT_FOUND,
    ERROR_UNRECOGNIZED_TYPE,
)
from logging_config import get_logger
from schemas.messages import (
    ErrorMessage,
    JoinRoomRequest,
    JoinSuccess,
    MessageKind,
    PlayerBuzzed,
    PlayerJoined,
    RoomCreated,
    SyncBoardStateRequest,
    classify,
)

logger = get_logger(__name__)


class MessageRouter:
    """Decides where each inbound message goes.

    Routing depends only on the message type and the sender's role, never on
    game semantics. Every handler finishes its room mutation before its first
    await, so the event loop keeps each mutation atomic.
    """

    def __init__(self, registry: RoomRegistry):
        self.registry = registry

    async def handle(self, connection: Connection, raw: str):
        try:
            payload = json.loads(raw)
        except (ValueError, RecursionError, TypeError) as e:
            logger.warning(f"Discarding malformed message from connection {connection.connection_id}: {e}")
            return
        if not isinstance(payload, dict):
            logger.warning(f"Discarding non-object message from connection {connection.connection_id}")
            return

        kind = classify(payload)
        logger.debug(f"Message {payload.get('type')!r} ({kind.value}) from {connection!r}")

        if kind is MessageKind.UNRECOGNIZED:
            await self._reply_error(connection, ERROR_UNRECOGNIZED_TYPE.format(type=payload.get("type")))
        elif kind is MessageKind.CREATE_ROOM:
            await self.create_room(connection)
        elif kind is MessageKind.JOIN_ROOM:
            await self.join_room(connection, payload)
        elif connection.role is Role.HOST:
            await self.route_from_host(connection, kind, payload, raw)
        elif connection.role is Role.PLAYER:
            await self.route_from_player(connection, kind, payload)
        else:
            logger.debug(f"Dropping {payload.get('type')!r} from unbound connection {connection.connection_id}")

    async def create_room(self, connection: Connection):
        if connection.role is not Role.UNBOUND:
            await self._reply_error(connection, ERROR_ALREADY_IN_ROOM)
            return
        code = self.registry.create(connection)
        await connection.send_json(RoomCreated(code=code).model_dump())

    async def join_room(self, connection: Connection, payload: dict):
        if connection.role is not Role.UNBOUND:
            await self._reply_error(connection, ERROR_ALREADY_IN_ROOM)
            return
        try:
            request = JoinRoomRequest.model_validate(payload)
        except ValidationError as e:
            logger.info(f"Rejecting invalid join request from connection {connection.connection_id}: {e.error_count()} errors")
            await self._reply_error(connection, ERROR_INVALID_JOIN)
            return

        code = request.code.upper()
        room = self.registry.get(code)
        if room is None:
            logger.info(f"Join failed: room {code} not found")
            await self._reply_error(connection, ERROR_ROOM_NOT_FOUND)
            return

        name = normalize_name(request.name)
        if room.find_player(name) is not None:
            logger.info(f"Join failed: name {name} already taken in room {code}")
            await self._reply_error(connection, ERROR_NAME_TAKEN)
            return

        player_index = len(room.players)
        connection.bind(PlayerBinding(room_code=code, name=name, player_index=player_index))
        room.players.append(connection)
        logger.info(f"Player {name} joined room {code} as index {player_index} (players: {len(room.players)})")

        joined = PlayerJoined(name=name, picture=request.picture, playerIndex=player_index)
        await asyncio.gather(
            connection.send_json(JoinSuccess(playerIndex=player_index).model_dump()),
            room.host.send_json(joined.model_dump()),
        )

    async def route_from_host(self, connection: Connection, kind: MessageKind, payload: dict, raw: str):
        room = self.registry.get(connection.room_code)
        if room is None or room.host is not connection:
            logger.debug(f"Dropping host message for missing room {connection.room_code}")
            return

        if kind is MessageKind.SYNC_BOARD_STATE:
            try:
                target_name = SyncBoardStateRequest.model_validate(payload).name
            except ValidationError:
                logger.debug(f"Dropping sync_board_state without a target name in room {room.code}")
                return
            target = room.find_player(target_name)
            if target is None:
                logger.debug(f"Dropping sync_board_state for unknown player {target_name} in room {room.code}")
                return
            await target.send_text(raw)
            return

        if kind is MessageKind.START_GAME and room.start():
            logger.info(f"Room {room.code} game started with {len(room.players)} players")

        players = list(room.players)
        logger.debug(f"Broadcasting {payload['type']!r} to {len(players)} players in room {room.code}")
        if players:
            await asyncio.gather(*(player.send_text(raw) for player in players), return_exceptions=True)

    async def route_from_player(self, connection: Connection, kind: MessageKind, payload: dict):
        room = self.registry.get(connection.room_code)
        if room is None:
            logger.debug(f"Dropping player message for missing room {connection.room_code}")
            return

        if kind is MessageKind.BUZZ:
            message = PlayerBuzzed(name=connection.display_name, playerIndex=connection.player_index).model_dump()
        else:
            message = dict(payload)
            message["playerIndex"] = connection.player_index
            message["playerName"] = connection.display_name
        await room.host.send_json(message)

    async def _reply_error(self, connection: Connection, message: str):
        await connection.send_json(ErrorMessage(message=message).model_dump())
