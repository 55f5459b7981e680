"""
Entry Point for Server Deployment

Starts the help queue API with uvicorn. The event log worker runs as
a background task inside the same process, because it drains an
in-memory buffer that the request handlers fill.

Configuration comes from environment variables (see
helpqueue/core/config.py); PORT is honoured as cloud hosts set it.
"""

import logging
import sys

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)


def main():
    """Run the API server until interrupted."""
    import uvicorn
    from helpqueue.core.config import settings
    from helpqueue.main import app

    print("=" * 70)
    print("CLASSROOM HELP QUEUE API")
    print("=" * 70)
    print(f"Binding to {settings.server_host}:{settings.server_port}")
    print(f"Docs: http://localhost:{settings.server_port}/docs")
    print("=" * 70)

    logger.info(f"Starting FastAPI server on {settings.server_host}:{settings.server_port}...")

    uvicorn.run(
        app,
        host=settings.server_host,
        port=settings.server_port,
        log_level="info",
        access_log=True
    )


if __name__ == "__main__":
    main()
