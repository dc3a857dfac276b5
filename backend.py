import json
import random
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Union

from fastapi.websockets import WebSocketState

from constants import ROOM_CODE_ALPHABET, ROOM_CODE_LENGTH
from logging_config import get_logger

logger = get_logger(__name__)


class Role(str, Enum):
    UNBOUND = "unbound"
    HOST = "host"
    PLAYER = "player"


class Phase(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"


def normalize_name(name: str) -> str:
    return name.upper()


@dataclass(frozen=True)
class HostBinding:
    room_code: str


@dataclass(frozen=True)
class PlayerBinding:
    room_code: str
    name: str
    player_index: int


class Connection:
    """One live WebSocket peer plus what the relay knows about it.

    The socket is owned by the transport; this object only borrows it for the
    lifetime of the session. A connection starts unbound and is bound exactly
    once, either as the host of a room or as one of its players.
    """

    def __init__(self, websocket):
        self.websocket = websocket
        self.connection_id = str(uuid.uuid4())
        self.binding: Optional[Union[HostBinding, PlayerBinding]] = None

    @property
    def role(self) -> Role:
        if isinstance(self.binding, HostBinding):
            return Role.HOST
        if isinstance(self.binding, PlayerBinding):
            return Role.PLAYER
        return Role.UNBOUND

    @property
    def room_code(self) -> Optional[str]:
        return self.binding.room_code if self.binding else None

    @property
    def display_name(self) -> Optional[str]:
        return self.binding.name if isinstance(self.binding, PlayerBinding) else None

    @property
    def player_index(self) -> Optional[int]:
        return self.binding.player_index if isinstance(self.binding, PlayerBinding) else None

    def bind(self, binding: Union[HostBinding, PlayerBinding]):
        if self.binding is not None:
            raise RuntimeError(f"Connection {self.connection_id} is already bound as {self.role.value}")
        self.binding = binding

    def is_open(self) -> bool:
        return (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    async def send_text(self, data: str):
        if not self.is_open():
            logger.debug(f"Skipping send to connection {self.connection_id}: socket not open")
            return
        try:
            await self.websocket.send_text(data)
        except Exception as e:
            logger.warning(f"Error sending to connection {self.connection_id}: {e}")

    async def send_json(self, message: dict):
        await self.send_text(json.dumps(message))

    async def close(self, code: int = 1000):
        if not self.is_open():
            return
        try:
            await self.websocket.close(code=code)
        except Exception as e:
            logger.debug(f"Error closing connection {self.connection_id}: {e}")

    def __repr__(self):
        return f"<Connection {self.connection_id[:8]} {self.role.value} room={self.room_code}>"


@dataclass
class Room:
    code: str
    host: Connection
    players: List[Connection] = field(default_factory=list)
    phase: Phase = Phase.OPEN
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())

    def find_player(self, name: str) -> Optional[Connection]:
        """Find a player by display name, normalizing the name first."""
        wanted = normalize_name(name)
        for player in self.players:
            if player.display_name == wanted:
                return player
        return None

    def remove_player(self, connection: Connection) -> bool:
        # identity match: a reconnect under the same name is a different entry
        for i, player in enumerate(self.players):
            if player is connection:
                del self.players[i]
                return True
        return False

    def start(self) -> bool:
        if self.phase is Phase.IN_PROGRESS:
            return False
        self.phase = Phase.IN_PROGRESS
        return True


class RoomRegistry:
    """In-memory table of open rooms, keyed by room code.

    Entries are added when a host creates a room and removed when that host
    disconnects. There is no other removal path.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rooms: Dict[str, Room] = {}
        self.rng = rng or random.Random()
        logger.info("Initializing in-memory RoomRegistry")

    def generate_code(self) -> str:
        while True:
            code = "".join(self.rng.choices(ROOM_CODE_ALPHABET, k=ROOM_CODE_LENGTH))
            if code not in self.rooms:
                return code
            logger.debug(f"Room code {code} already in use, drawing again")

    def create(self, host: Connection) -> str:
        code = self.generate_code()
        host.bind(HostBinding(room_code=code))
        self.rooms[code] = Room(code=code, host=host)
        logger.info(f"Room {code} created by host {host.connection_id} (open rooms: {len(self.rooms)})")
        return code

    def get(self, code: str) -> Optional[Room]:
        """Look up a room. Codes are stored uppercase; callers normalize user input."""
        room = self.rooms.get(code)
        if room is None:
            logger.debug(f"Room {code} not found")
        return room

    def remove(self, code: str):
        room = self.rooms.pop(code, None)
        if room is not None:
            logger.info(f"Room {code} removed (open rooms: {len(self.rooms)})")

    def __contains__(self, code: str) -> bool:
        return code in self.rooms

    def __len__(self) -> int:
        return len(self.rooms)
