"""Process-wide runtime objects.

One configuration, one controller session and one set of managers per
process. Nothing here touches the network: the session logs in lazily on
the first controller call.
"""

from mcp.server.fastmcp import FastMCP

from ppsk_gateway.bootstrap import load_config
from ppsk_gateway.managers.client_directory import ClientDirectory
from ppsk_gateway.managers.controller_gateway import ControllerGateway
from ppsk_gateway.managers.ppsk_manager import PpskManager
from ppsk_gateway.managers.session_manager import ControllerSession

config = load_config()

server = FastMCP("ppsk-gateway")

controller_session = ControllerSession.from_config(config.unifi)
gateway = ControllerGateway(controller_session)
client_directory = ClientDirectory(gateway)
ppsk_manager = PpskManager(gateway)
