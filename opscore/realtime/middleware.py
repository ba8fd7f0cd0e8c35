from urllib.parse import parse_qs

from channels.middleware import BaseMiddleware

from opscore.exceptions import InvalidToken
from opscore.services.tokens import decode_session_token


class SessionTokenMiddleware(BaseMiddleware):
    """Resolve ``?token=<session token>`` into ``scope['session_ctx']``.

    Browsers cannot set an Authorization header on a WebSocket handshake,
    so the bearer token travels in the query string.  Invalid or missing
    tokens leave ``scope['session_ctx']`` as ``None``.
    """

    async def __call__(self, scope, receive, send):
        scope = dict(scope)
        params = parse_qs(scope.get('query_string', b'').decode('latin-1'))
        raw = (params.get('token') or [''])[0]
        ctx = None
        if raw:
            try:
                ctx = decode_session_token(raw)
            except InvalidToken:
                ctx = None
        scope['session_ctx'] = ctx
        return await super().__call__(scope, receive, send)
