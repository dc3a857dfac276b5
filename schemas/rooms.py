from pydantic import BaseModel
from typing import List


class PlayerSummary(BaseModel):
    name: str
    playerIndex: int

class RoomDetailsResponse(BaseModel):
    code: str
    phase: str
    created_at: str
    player_count: int
    players: List[PlayerSummary]
