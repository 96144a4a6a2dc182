"""Dishka FastAPI integration using Scope.UOW."""

from dishka import AsyncContainer
from starlette.requests import Request
from starlette.types import ASGIApp, Receive, Scope, Send

from cardscope.util.di.scope import Scope as CardscopeScope


class ContainerMiddleware:
    """ASGI middleware that opens a Scope.UOW container for each HTTP request.

    Replaces dishka.integrations.starlette.ContainerMiddleware, which enters
    dishka.Scope.REQUEST instead of our UOW scope.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        request = Request(scope, receive=receive, send=send)
        async with request.app.state.dishka_container(
            {Request: request},
            scope=CardscopeScope.UOW,
        ) as request_container:
            request.state.dishka_container = request_container
            return await self.app(scope, receive, send)


def setup_dishka(container: AsyncContainer, app) -> None:
    """Attach the container and the per-request scope middleware to an app."""
    app.add_middleware(ContainerMiddleware)
    app.state.dishka_container = container
