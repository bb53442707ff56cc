"""
CORS middleware for the admin client
"""

from fastapi.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp, Receive, Scope, Send


class ClientCORSMiddleware(CORSMiddleware):
    """
    CORSMiddleware that leaves preflights of some paths to their routes.

    Routes under passthrough_prefixes answer OPTIONS themselves with their
    own Access-Control-* headers, whatever the request origin.
    """

    def __init__(
        self,
        app: ASGIApp,
        passthrough_prefixes: tuple[str, ...] = (),
        **kwargs,
    ) -> None:
        super().__init__(app, **kwargs)
        self.passthrough_prefixes = passthrough_prefixes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if (
            scope["type"] == "http"
            and scope["method"] == "OPTIONS"
            and scope["path"].startswith(self.passthrough_prefixes)
        ):
            await self.app(scope, receive, send)
            return
        await super().__call__(scope, receive, send)
