# File: mowen_mcp/server.py

"""
Main server implementation for mowen-mcp.
Registers the note tools with an MCP server and serves them over stdio.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from mcp.server import Server, NotificationOptions
from mcp.server.models import InitializationOptions
import mcp.server.stdio
import mcp.types as types

from .config import Config
from .memory import NoteStore
from .tools import ClientFactory, Tool, create_tools_registry

logger = logging.getLogger(__name__)

class MowenServer:
    """MCP server exposing Mowen note tools to an agent."""

    def __init__(self, config: Config, client_factory: Optional[ClientFactory] = None):
        self.config = config
        self.server = Server(config.server.name)
        self.store = NoteStore(config.db_path)
        self.tools: Dict[str, Tool] = {
            tool.name: tool
            for tool in create_tools_registry(config, self.store, client_factory)
        }
        self._setup_tools()

    def _setup_tools(self) -> None:
        """Register all available tools with the MCP server."""
        logger.info("Setting up tools...")

        @self.server.list_tools()
        async def handle_list_tools() -> List[types.Tool]:
            logger.debug("Tool list requested")
            return self.list_tools()

        @self.server.call_tool()
        async def handle_call_tool(name: str, arguments: Optional[Dict[str, Any]] = None) -> List[types.TextContent]:
            return await self.call_tool(name, arguments)

    def list_tools(self) -> List[types.Tool]:
        return [tool.to_mcp_tool() for tool in self.tools.values()]

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> List[types.TextContent]:
        """Run a tool by name and wrap its output as MCP text content."""
        tool = self.tools.get(name)
        if tool is None:
            raise ValueError(f"Unknown tool: {name}")

        logger.info(f"Tool called: {name}")
        logger.debug(f"Arguments for {name}: {arguments}")
        results = await tool.execute(arguments or {})
        return [types.TextContent(type="text", text=text) for text in results]

    async def shutdown(self) -> None:
        """Release the note store."""
        try:
            self.store.close()
        except Exception as e:
            logger.error(f"Error during shutdown: {e}")

    async def run(self) -> None:
        """Start the MCP server using stdio transport."""
        logger.info(f"Starting {self.config.server.name} server...")
        logger.info(f"API base URL: {self.config.base_url}")
        logger.info(f"Note store: {self.config.db_path}")

        try:
            async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
                logger.info("Server transport established")
                capabilities = self.server.get_capabilities(
                    notification_options=NotificationOptions(),
                    experimental_capabilities={}
                )
                await self.server.run(
                    read_stream,
                    write_stream,
                    InitializationOptions(
                        server_name=self.config.server.name,
                        server_version=self.config.server.version,
                        capabilities=capabilities
                    )
                )
        except Exception as e:
            logger.error(f"Server error: {e}", exc_info=True)
            raise
        finally:
            await self.shutdown()

async def main(config_path: Optional[str] = None) -> None:
    """Main entry point."""
    config = Config.load(config_path)
    server = MowenServer(config)

    try:
        await server.run()
    except KeyboardInterrupt:
        logger.info("Server shutdown requested")

if __name__ == "__main__":
    asyncio.run(main())
