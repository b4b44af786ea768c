"""Math Preview MCP Server - Main entry point."""
import logging
import sys

from mcp.server.fastmcp import FastMCP

from math_preview.config import Config
from math_preview.core.adaptor import adaptor, load_math_extensions
from math_preview.tools import preview

# Configure logging to stderr (CRITICAL: stdout is reserved for JSON-RPC)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)]
)

logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("math-preview")

# Load configuration
config = Config.load()

logger.info(f"Math Preview v{config.version} starting...")
logger.info(f"Settings file: {config.settings_path}")
logger.info(f"Scale: {config.math_scale}, theme: {config.math_theme}")


def main():
    """Main entry point for the MCP server."""
    try:
        load_math_extensions(config)
        logger.info(f"Active extensions: {', '.join(adaptor.extensions)}")

        # Register tools
        logger.info("Registering tools...")
        preview.register(mcp, config)
        logger.info(
            "Tools registered: math_hover, render_math, "
            "reload_math_config, get_math_extensions"
        )

        # Run the server
        logger.info("Starting MCP server on stdio...")
        mcp.run(transport="stdio")

    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
