import asyncio

from backend import Connection, Role, RoomRegistry
from logging_config import get_logger
from schemas.messages import PlayerLeft, RoomClosed

logger = get_logger(__name__)


class ConnectionLifecycleManager:
    def __init__(self, registry: RoomRegistry):
        self.registry = registry

    def on_connect(self, websocket) -> Connection:
        connection = Connection(websocket)
        logger.info(f"Connection {connection.connection_id} opened")
        return connection

    async def on_close(self, connection: Connection):
        """Apply the room-side effects of a connection going away.

        A host leaving ends the whole session: the room is dropped from the
        registry, then every player is told and disconnected. A player leaving
        only removes that player; the host hears about it with `player_left`
        and the remaining players keep their original indices.
        """
        logger.info(f"Connection {connection.connection_id} closed ({connection.role.value})")
        if connection.role is Role.UNBOUND:
            return

        room = self.registry.get(connection.room_code)
        if room is None:
            return

        if connection.role is Role.HOST:
            if room.host is not connection:
                return
            self.registry.remove(room.code)
            players = list(room.players)
            room.players.clear()
            closed = RoomClosed().model_dump()
            await asyncio.gather(*(self._close_player(player, closed) for player in players))
            logger.info(f"Room {room.code} has been closed, {len(players)} players disconnected")
            return

        if not room.remove_player(connection):
            return
        logger.info(f"Player {connection.display_name} left room {room.code} (players: {len(room.players)})")
        left = PlayerLeft(name=connection.display_name, playerIndex=connection.player_index)
        await room.host.send_json(left.model_dump())

    async def _close_player(self, player: Connection, notice: dict):
        await player.send_json(notice)
        await player.close()
