import json

from fastapi.websockets import WebSocketState


class FakeWebSocket:
    """Stands in for a Starlette WebSocket: records what the relay sends."""

    def __init__(self):
        self.sent = []
        self.close_code = None
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED

    async def send_text(self, data):
        self.sent.append(data)

    async def close(self, code=1000):
        self.close_code = code
        self.application_state = WebSocketState.DISCONNECTED

    @property
    def closed(self):
        return self.close_code is not None

    def messages(self):
        return [json.loads(data) for data in self.sent]

    def last(self):
        return json.loads(self.sent[-1])


class ScriptedRandom:
    """Random source that hands out the given room codes in order."""

    def __init__(self, codes):
        self.codes = iter(codes)

    def choices(self, population, weights=None, *, cum_weights=None, k=1):
        return list(next(self.codes))
