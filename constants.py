import os
import string

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 8080))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", None)

ROOM_CODE_LENGTH = int(os.getenv("ROOM_CODE_LENGTH", 4))
ROOM_CODE_ALPHABET = string.ascii_uppercase

SERVER_NAME = "Spellbound Relay Server"

# Error texts sent back to the offending client
ERROR_ROOM_NOT_FOUND = "Room not found."
ERROR_NAME_TAKEN = "Name is already taken."
ERROR_INVALID_JOIN = "Invalid join request."
ERROR_ALREADY_IN_ROOM = "Already in a room."
ERROR_UNRECOGNIZED_TYPE = "Unrecognized message type: {type!r}"
