"""aiohttp application factory."""

import logging
from typing import Optional

from aiohttp import web

from ppsk_gateway.managers.client_directory import ClientDirectory
from ppsk_gateway.managers.ppsk_manager import PpskManager
from ppsk_gateway.managers.session_manager import ControllerSession

from .middleware import bearer_auth_middleware, error_envelope
from .routes import CLIENT_DIRECTORY, PPSK_MANAGER, routes

logger = logging.getLogger("ppsk-gateway")


def create_app(
    bearer_token: str,
    client_directory: ClientDirectory,
    ppsk_manager: PpskManager,
    session: Optional[ControllerSession] = None,
) -> web.Application:
    """Build the HTTP application.

    Args:
        bearer_token: Token required on every route except /healthz.
        client_directory: Manager backing the /clients routes.
        ppsk_manager: Manager backing the /ppsk routes.
        session: Controller session closed when the app shuts down.
    """
    if not bearer_token:
        logger.warning("API_BEARER_TOKEN is not set, every protected route will answer 401")

    app = web.Application(middlewares=[bearer_auth_middleware(bearer_token), error_envelope])
    app[CLIENT_DIRECTORY] = client_directory
    app[PPSK_MANAGER] = ppsk_manager
    app.add_routes(routes)

    if session is not None:

        async def _close_session(app: web.Application) -> None:
            await session.close()

        app.on_cleanup.append(_close_session)

    return app
