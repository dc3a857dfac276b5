from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from routers.rooms import rooms_router
from backend import Connection, RoomRegistry
from relay import MessageRouter
from lifecycle import ConnectionLifecycleManager
from constants import LOG_FILE, LOG_LEVEL, SERVER_NAME
from logging_config import get_logger, setup_logging

# Setup logging
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)

app = FastAPI(title=SERVER_NAME)

# Configure CORS to allow all origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(rooms_router)

# Room table for this process. Rooms live only as long as their host's
# socket, so nothing here survives a restart.
registry = RoomRegistry()
app.state.registry = registry
message_router = MessageRouter(registry)
lifecycle = ConnectionLifecycleManager(registry)

logger.info("FastAPI application initialized")


@app.api_route("/", methods=["GET", "HEAD"], response_class=PlainTextResponse)
async def health():
    """Liveness probe for uptime monitors."""
    logger.debug("Received HTTP ping")
    return f"{SERVER_NAME} is alive."


async def receive_payload(websocket: WebSocket) -> str:
    """Wait for the next frame, decoding binary frames as UTF-8 text."""
    message = await websocket.receive()
    if message["type"] == "websocket.disconnect":
        raise WebSocketDisconnect(code=message.get("code", 1000), reason=message.get("reason"))
    if message.get("text") is not None:
        return message["text"]
    return (message.get("bytes") or b"").decode("utf-8", errors="replace")


@app.websocket("/")
@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """WebSocket endpoint shared by hosts and players.

    A connection says what it is with its first `create_room` or `join_room`
    message; everything after that is routed by role.
    """
    await websocket.accept()
    connection: Connection = lifecycle.on_connect(websocket)

    message_count = 0
    try:
        while True:
            data = await receive_payload(websocket)
            message_count += 1
            logger.debug(f"Received message #{message_count} from connection {connection.connection_id}")
            await message_router.handle(connection, data)
    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected for connection {connection.connection_id}")
    except Exception as e:
        logger.error(f"Error handling connection {connection.connection_id}: {e}", exc_info=True)
    finally:
        await lifecycle.on_close(connection)
        await connection.close()
