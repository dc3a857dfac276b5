from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class MessageKind(str, Enum):
    CREATE_ROOM = "create_room"
    JOIN_ROOM = "join_room"
    SYNC_BOARD_STATE = "sync_board_state"
    START_GAME = "start_game"
    BUZZ = "buzz"
    # any other string type: relayed without interpretation
    RELAY = "relay"
    # missing or non-string type
    UNRECOGNIZED = "unrecognized"


WIRE_KINDS = {
    "create_room": MessageKind.CREATE_ROOM,
    "join_room": MessageKind.JOIN_ROOM,
    "join": MessageKind.JOIN_ROOM,
    "sync_board_state": MessageKind.SYNC_BOARD_STATE,
    "start_game": MessageKind.START_GAME,
    "buzz": MessageKind.BUZZ,
}


def classify(payload: dict) -> MessageKind:
    message_type = payload.get("type")
    if not isinstance(message_type, str):
        return MessageKind.UNRECOGNIZED
    return WIRE_KINDS.get(message_type, MessageKind.RELAY)


# Client -> server

class JoinRoomRequest(BaseModel):
    code: str
    name: str = Field(min_length=1)
    picture: Optional[Any] = None


class SyncBoardStateRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str


# Server -> client

class RoomCreated(BaseModel):
    type: Literal["room_created"] = "room_created"
    code: str

class JoinSuccess(BaseModel):
    type: Literal["join_success"] = "join_success"
    playerIndex: int

class ErrorMessage(BaseModel):
    type: Literal["error"] = "error"
    message: str

class PlayerJoined(BaseModel):
    type: Literal["player_joined"] = "player_joined"
    name: str
    picture: Optional[Any] = None
    playerIndex: int

class PlayerLeft(BaseModel):
    type: Literal["player_left"] = "player_left"
    name: str
    playerIndex: int

class PlayerBuzzed(BaseModel):
    type: Literal["player_buzzed"] = "player_buzzed"
    name: str
    playerIndex: int

class RoomClosed(BaseModel):
    type: Literal["room_closed"] = "room_closed"
