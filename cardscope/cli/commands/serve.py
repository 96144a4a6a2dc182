"""Run the API server."""

import uvicorn


def serve(host: str = "127.0.0.1", port: int = 8000, reload: bool = False) -> None:
    """Run the cardscope API server in the foreground.

    Args:
        host: Host to bind to.
        port: Port to listen on.
        reload: Restart on code changes (development).
    """
    uvicorn.run(
        "cardscope.application.api.rest.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )
