"""Entry point: serve the HTTP gateway, or the MCP tools over stdio."""

import argparse
import logging

from aiohttp import web

logger = logging.getLogger("ppsk-gateway")


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(prog="ppsk-gateway", description="UniFi client and PPSK gateway")
    parser.add_argument("--mcp", action="store_true", help="serve MCP tools over stdio instead of HTTP")
    args = parser.parse_args(argv)

    # runtime loads the configuration on import
    from ppsk_gateway import runtime
    from ppsk_gateway.bootstrap import setup_logging

    setup_logging(runtime.config.log_level)

    if args.mcp:
        import ppsk_gateway.tools.clients  # noqa: F401  (registers tools)
        import ppsk_gateway.tools.ppsk  # noqa: F401

        logger.info("Starting MCP server (stdio)")
        runtime.server.run()
        return

    from ppsk_gateway.web.app import create_app

    app = create_app(
        runtime.config.server.bearer_token,
        runtime.client_directory,
        runtime.ppsk_manager,
        session=runtime.controller_session,
    )
    logger.info(f"Starting HTTP gateway on {runtime.config.server.host}:{runtime.config.server.port}")
    web.run_app(app, host=runtime.config.server.host, port=runtime.config.server.port, print=None)


if __name__ == "__main__":
    main()
