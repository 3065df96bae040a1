#!/usr/bin/env python
import argparse
import asyncio
import sys
import logging
from pathlib import Path

from mowen_mcp.server import main

LOG_DIR = Path.home() / ".mowen-mcp"

logger = logging.getLogger("mowen_mcp")

def setup_logging(log_dir: Path = LOG_DIR, debug: bool = False) -> None:
    """Log to a file under ``log_dir`` and to stderr; stdout carries the MCP protocol."""
    log_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_dir / 'mowen-mcp.log'),
            logging.StreamHandler(sys.stderr)
        ]
    )

def run():
    """Wrapper to handle keyboard interrupts."""
    parser = argparse.ArgumentParser(prog="mowen-mcp", description="MCP server for Mowen notes")
    parser.add_argument("--config", help="Path to a JSON or YAML config file")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    setup_logging(debug=args.debug)

    try:
        asyncio.run(main(args.config))
    except KeyboardInterrupt:
        logger.info("Received exit request...")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Fatal error: {str(e)}", exc_info=True)
        sys.exit(1)

if __name__ == "__main__":
    run()
