"""
API Server Runner

Entry point for running the FastAPI server with environment setup and
directory preparation.
"""

import argparse
import logging
import os
import sys
import traceback
import uvicorn

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("api_runner")


def parse_arguments():
    """Parse command line arguments for the API server."""
    parser = argparse.ArgumentParser(description="Run the Support Triage API server")

    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host to bind the server to (default: 127.0.0.1)"
    )

    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to bind the server to (default: 8000)"
    )

    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development"
    )

    parser.add_argument(
        "--env",
        type=str,
        choices=["development", "testing", "production"],
        default="development",
        help="Environment to run in (default: development)"
    )

    return parser.parse_args()


def setup_environment(env):
    """
    Set environment variables and make sure the data directories exist.

    Args:
        env: Environment name (development, testing, production)
    """
    os.environ["ENVIRONMENT"] = env
    os.environ["DEBUG"] = "true" if env in ["development", "testing"] else "false"

    for directory in ["data", "data/metrics", "logs"]:
        os.makedirs(directory, exist_ok=True)
        logger.info(f"Ensured directory exists: {directory}")


def main():
    args = parse_arguments()
    setup_environment(args.env)

    if not os.environ.get("GROQ_API_KEY"):
        logger.warning("GROQ_API_KEY is not set in the environment; it must be provided via .env")

    logger.info(f"Starting API server in {args.env} mode")
    logger.info(f"Server will be available at http://{args.host}:{args.port}")

    if args.env == "development":
        logger.info(f"API documentation will be available at http://{args.host}:{args.port}/docs")

    uvicorn.run(
        "api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info" if args.env == "production" else "debug"
    )


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Error running server: {str(e)}")
        logger.error(traceback.format_exc())
        sys.exit(1)
