"""
mowen-mcp: An MCP server for writing Mowen notes.
Provides note creation, editing, privacy settings and local note search.
"""

from typing import Optional

from mowen_mcp.server import MowenServer
from mowen_mcp.config import Config

__version__ = "1.0.0"

def create_server(
    api_key: Optional[str] = None,
    config_path: Optional[str] = None
) -> MowenServer:
    """Create and configure a mowen-mcp server instance."""
    config = Config.load(config_path)

    if api_key:
        config.api_key = api_key

    return MowenServer(config)

# Export main components
__all__ = ['MowenServer', 'Config', 'create_server']
