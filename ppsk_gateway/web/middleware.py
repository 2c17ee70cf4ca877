"""aiohttp middlewares: bearer-token auth and the JSON error envelope."""

import hmac
import logging
import re

from aiohttp import web

from ppsk_gateway.exceptions import GatewayError

logger = logging.getLogger("ppsk-gateway")

PUBLIC_PATHS = frozenset({"/healthz"})
_BEARER_RE = re.compile(r"^Bearer\s+(.*)$", re.IGNORECASE)


def json_error(message: str, status: int, **headers: str) -> web.Response:
    return web.json_response({"error": message}, status=status, headers=headers or None)


def _unauthorized() -> web.Response:
    return json_error("Unauthorized", 401, **{"WWW-Authenticate": "Bearer"})


def bearer_auth_middleware(token: str):
    """Require `Authorization: Bearer <token>` on every non-public path.

    An empty configured token rejects every protected request.
    """

    @web.middleware
    async def bearer_auth(request: web.Request, handler):
        if request.path in PUBLIC_PATHS:
            return await handler(request)
        if not token:
            return _unauthorized()

        match = _BEARER_RE.match(request.headers.get("Authorization", ""))
        if match and hmac.compare_digest(token.encode(), match.group(1).strip().encode()):
            return await handler(request)

        logger.debug(f"Rejected unauthenticated {request.method} {request.path}")
        return _unauthorized()

    return bearer_auth


@web.middleware
async def error_envelope(request: web.Request, handler):
    """Turn gateway errors into JSON responses.

    Client errors keep their message. Anything that maps to 5xx is logged
    and answered with a generic body so controller details never leak.
    """
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except GatewayError as e:
        if e.http_status < 500:
            logger.warning(f"{request.method} {request.path} rejected: {e.message}")
            return json_error(e.message, e.http_status)
        logger.error(f"{request.method} {request.path} error: {e.message}")
        return json_error("Internal Server Error", 500)
    except Exception as e:
        logger.error(f"{request.method} {request.path} unexpected error: {e}", exc_info=True)
        return json_error("Internal Server Error", 500)
