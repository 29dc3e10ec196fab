"""MCP stdio entrypoint.

Wires the tool dispatcher onto the ``mcp`` SDK's low-level server: one
handler for tools/list, one for tools/call. Every tools/call is answered
with exactly one CallToolResult, error or not.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import sys
from typing import Any, Dict, List, Mapping, Optional

from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from core.config import Settings, load_settings
from core.errors import StartupError, TransportError
from core.logs import setup_logging
from tools import Dispatcher, ToolRegistry, build_registry

logger = logging.getLogger("slack_mcp")

SHUTDOWN_GRACE_SECONDS = 1.0


class SlackMCPServer:
    def __init__(self, settings: Settings, registry: ToolRegistry) -> None:
        self.settings = settings
        self.registry = registry
        self.dispatcher = Dispatcher(registry, timeout=settings.tool_timeout_seconds)
        self.started = False
        self.shutdown_signal: Optional[signal.Signals] = None

        self.server: Server = Server(settings.server_name, version=settings.server_version)
        self.server.list_tools()(self.handle_list_tools)
        # arguments are validated by the dispatcher, against the same models the schemas come from
        self.server.call_tool(validate_input=False)(self.handle_call_tool)

    async def handle_list_tools(self) -> List[types.Tool]:
        return [
            types.Tool(name=t["name"], description=t["description"], inputSchema=t["inputSchema"])
            for t in self.dispatcher.list_tools()
        ]

    async def handle_call_tool(self, name: str, arguments: Optional[Dict[str, Any]]) -> types.CallToolResult:
        envelope = await self.dispatcher.call(name, arguments)
        return types.CallToolResult.model_validate(envelope.to_wire())

    async def serve(self) -> None:
        try:
            async with stdio_server() as (read_stream, write_stream):
                self.started = True
                logger.info("%s v%s started successfully", self.settings.server_name, self.settings.server_version)
                logger.info("Available tools: %d", len(self.registry))
                await self.server.run(read_stream, write_stream, self.server.create_initialization_options())
        except OSError as e:
            if self.started:
                raise
            raise TransportError(f"Could not open stdio transport: {e}") from e


def exit_process(code: int) -> None:
    logging.shutdown()
    os._exit(code)


async def run_until_signal(server: SlackMCPServer) -> int:
    """Serve until stdin closes or SIGINT/SIGTERM arrives; both exit 0.

    In-flight calls are not drained. The stdio reader blocks in a worker
    thread that cancellation cannot interrupt, so if serving has not wound
    down within ``SHUTDOWN_GRACE_SECONDS`` of a signal the process exits
    without waiting for it.
    """
    loop = asyncio.get_running_loop()
    serve_task = asyncio.ensure_future(server.serve())
    force_exit: List[asyncio.TimerHandle] = []

    def _on_signal(sig: signal.Signals) -> None:
        logger.info("Received %s, shutting down gracefully...", sig.name)
        server.shutdown_signal = sig
        serve_task.cancel()
        if not force_exit:
            force_exit.append(loop.call_later(SHUTDOWN_GRACE_SECONDS, exit_process, 0))

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _on_signal, sig)
        except (NotImplementedError, RuntimeError):
            # no loop signal support (Windows); SIGINT still arrives as KeyboardInterrupt
            pass

    try:
        await serve_task
    except asyncio.CancelledError:
        if server.shutdown_signal is None:
            raise
    finally:
        for handle in force_exit:
            handle.cancel()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.remove_signal_handler(sig)
            except (NotImplementedError, RuntimeError):
                pass
    return 0


def main(environ: Optional[Mapping[str, str]] = None) -> int:
    try:
        settings = load_settings(environ)
    except StartupError as e:
        setup_logging()
        logger.error("Failed to start server: %s", e)
        return 1

    setup_logging(settings.log_level, settings.log_file)

    try:
        server = SlackMCPServer(settings, build_registry(settings))
    except Exception:
        logger.exception("Failed to start server")
        return 1

    try:
        code = asyncio.run(run_until_signal(server))
    except KeyboardInterrupt:
        logger.info("Received SIGINT, shutting down gracefully...")
        return 0
    except Exception:
        if not server.started:
            logger.exception("Failed to start server")
        else:
            logger.exception("Unhandled error")
        return 1

    if server.shutdown_signal is not None:
        # a stdio reader thread still blocked on stdin would hold up interpreter exit
        exit_process(code)
    return code


if __name__ == "__main__":
    sys.exit(main())
