import asyncio
import logging
import ssl
from typing import Optional
from urllib.parse import urlparse

import aiohttp
from aiounifi.controller import Controller
from aiounifi.errors import AiounifiException
from aiounifi.models.configuration import Configuration

from ppsk_gateway.exceptions import AuthenticationError

logger = logging.getLogger("ppsk-gateway")

# Cookie that carries the login on each controller type
UNIFI_OS_COOKIE = "TOKEN"
LEGACY_COOKIE = "unifises"


class ControllerSession:
    """Owns the authenticated session with a single UniFi controller identity.

    Login is lazy: nothing talks to the controller until the first call to
    ensure_authenticated(). Expiry on the controller side is only noticed
    when a call fails, at which point the gateway calls invalidate().
    """

    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        site: str = "default",
        version: str = "9.0.0",
        verify_ssl: bool = True,
        request_timeout: int = 30,
    ):
        """Initialize the session.

        Args:
            base_url: Controller URL, e.g. 'https://192.168.1.1' or 'https://unifi:8443'.
            username: Controller admin username.
            password: Controller admin password.
            site: Site ID (slug) used in API paths.
            version: Controller version the gateway targets (logged at login).
            verify_ssl: Verify the controller TLS certificate.
            request_timeout: Total timeout in seconds for each controller call.
        """
        self.base_url = base_url.rstrip("/")
        self.username = username
        self.password = password
        self.site = site
        self.version = version
        self.verify_ssl = verify_ssl
        self.request_timeout = request_timeout
        self.controller: Optional[Controller] = None
        self._aiohttp_session: Optional[aiohttp.ClientSession] = None
        self._authenticated = False
        self._connect_lock = asyncio.Lock()

    @classmethod
    def from_config(cls, settings) -> "ControllerSession":
        """Build a session from the `unifi` config section."""
        return cls(
            base_url=settings.base_url,
            username=settings.username,
            password=settings.password,
            site=settings.site,
            version=settings.version,
            verify_ssl=settings.verify_ssl,
            request_timeout=settings.request_timeout,
        )

    @property
    def host(self) -> str:
        parsed = urlparse(self.base_url)
        return parsed.hostname or self.base_url

    @property
    def port(self) -> int:
        parsed = urlparse(self.base_url)
        return parsed.port or 443

    @property
    def is_unifi_os(self) -> bool:
        """Controller-type flag as detected by aiounifi during login."""
        if not self.controller:
            return False
        return bool(self.controller.connectivity.is_unifi_os)

    def has_session_cookie(self) -> bool:
        """Check the cookie jar for the login cookie of the detected controller type."""
        if not self._aiohttp_session or self._aiohttp_session.closed:
            return False
        expected = UNIFI_OS_COOKIE if self.is_unifi_os else LEGACY_COOKIE
        return any(cookie.key == expected for cookie in self._aiohttp_session.cookie_jar)

    def is_valid(self) -> bool:
        return self._authenticated and self.controller is not None and self.has_session_cookie()

    def _ssl_context(self):
        if self.verify_ssl:
            return ssl.create_default_context()
        return False

    async def _open_http_session(self) -> aiohttp.ClientSession:
        # Calls still in flight on the open session keep running; only the
        # stale login cookies go away
        if self._aiohttp_session and not self._aiohttp_session.closed:
            self._aiohttp_session.cookie_jar.clear()
            return self._aiohttp_session
        connector = aiohttp.TCPConnector(ssl=self._ssl_context())
        self._aiohttp_session = aiohttp.ClientSession(
            connector=connector,
            cookie_jar=aiohttp.CookieJar(unsafe=True),
            timeout=aiohttp.ClientTimeout(total=self.request_timeout),
        )
        return self._aiohttp_session

    async def ensure_authenticated(self) -> Controller:
        """Return a logged-in controller, logging in first if the session is stale.

        Raises:
            AuthenticationError: Credentials rejected or controller unreachable.
        """
        if self.is_valid():
            return self.controller

        async with self._connect_lock:
            # Another task may have logged in while we waited
            if self.is_valid():
                return self.controller

            if not self.base_url:
                raise AuthenticationError("controller base URL is not configured")

            logger.info(
                f"Logging in to UniFi controller at {self.base_url} "
                f"(site '{self.site}', version {self.version})..."
            )
            self._authenticated = False
            self.controller = None
            try:
                session = await self._open_http_session()
                config = Configuration(
                    session=session,
                    host=self.host,
                    username=self.username,
                    password=self.password,
                    port=self.port,
                    site=self.site,
                    ssl_context=self._ssl_context(),
                )
                controller = Controller(config=config)
                await controller.login()
                # A call that hits an expired session must fail, not be
                # replayed by aiounifi after a silent re-login
                controller.connectivity.can_retry_login = False
            except (AiounifiException, asyncio.TimeoutError, aiohttp.ClientError, ValueError) as e:
                # ValueError: login answer declared as JSON but not parseable
                logger.error(f"Login to {self.base_url} failed: {e!r}")
                raise AuthenticationError(str(e) or type(e).__name__, {"base_url": self.base_url}) from e

            self.controller = controller
            self._authenticated = True
            mode = "UniFi OS" if self.is_unifi_os else "legacy"
            logger.info(f"Logged in to {mode} controller at {self.base_url}")
            return controller

    def invalidate(self) -> None:
        """Mark the session stale so the next call logs in again."""
        if self._authenticated:
            logger.warning(f"Session with {self.base_url} marked stale")
        self._authenticated = False
        if self._aiohttp_session and not self._aiohttp_session.closed:
            self._aiohttp_session.cookie_jar.clear()

    async def close(self) -> None:
        """Release the aiohttp session."""
        if self._aiohttp_session and not self._aiohttp_session.closed:
            await self._aiohttp_session.close()
            logger.info("aiohttp session closed.")
        self._aiohttp_session = None
        self.controller = None
        self._authenticated = False
