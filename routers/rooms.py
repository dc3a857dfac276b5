from fastapi import APIRouter, HTTPException, Request
from schemas.rooms import PlayerSummary, RoomDetailsResponse
from logging_config import get_logger

logger = get_logger(__name__)

rooms_router = APIRouter(prefix="/rooms", tags=["rooms"])


@rooms_router.get("/{code}", response_model=RoomDetailsResponse)
async def get_room_details(code: str, request: Request):
    """
    Get the current state of an open room.

    Returns:
    - code: The 4-letter room code
    - phase: "open" or "in_progress"
    - created_at: Room creation timestamp
    - player_count: Number of connected players
    - players: Connected players with their join-order index
    """
    client_host = request.client.host if request.client else 'unknown'
    code = code.upper()
    logger.info(f"Room details request for {code} from {client_host}")

    registry = request.app.state.registry
    room = registry.get(code)
    if not room:
        logger.warning(f"Room details failed: Room {code} not found")
        raise HTTPException(status_code=404, detail="Room not found")

    players = [
        PlayerSummary(name=player.display_name, playerIndex=player.player_index)
        for player in room.players
    ]
    return RoomDetailsResponse(
        code=room.code,
        phase=room.phase.value,
        created_at=room.created_at,
        player_count=len(players),
        players=players,
    )
