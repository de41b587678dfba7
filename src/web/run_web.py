"""
Run script for the Indie Trend Radar web API.
Starts the Quart app under Hypercorn with config from resources/config.yml
(or the file named by INDIE_RADAR_CONFIG).
Works as the installed `indie-radar-web` script or as `python src/web/run_web.py`.
"""
import os
import sys
import asyncio
import argparse
import logging
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


def run_server(config, host: str, port: int, debug: bool = False):
    """Run the web server."""
    from web.app import create_app

    app = create_app(config)

    logger.info(f"Starting Indie Trend Radar on http://{host}:{port}")

    from hypercorn.config import Config as HypercornConfig
    from hypercorn.asyncio import serve

    hypercorn_config = HypercornConfig()
    hypercorn_config.bind = [f"{host}:{port}"]
    hypercorn_config.use_reloader = debug
    hypercorn_config.accesslog = '-'
    hypercorn_config.errorlog = '-'

    asyncio.run(serve(app, hypercorn_config))


def main(argv=None):
    from services.config import load_config
    from services.logging import setup_logging

    # .env from the working directory, as load_config does
    load_dotenv(Path(os.getcwd()) / '.env')
    config = load_config()

    parser = argparse.ArgumentParser(description='Indie Trend Radar web API')
    parser.add_argument('--host', default=config.server.host,
                        help=f'Host to bind to (default: {config.server.host})')
    parser.add_argument('--port', type=int, default=config.server.port,
                        help=f'Port to bind to (default: {config.server.port})')
    parser.add_argument('--debug', action='store_true',
                        help='Enable debug logging and reloader')

    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.debug else config.server.log_level)
    logger.info(f"Working directory: {os.getcwd()}")

    run_server(config, host=args.host, port=args.port, debug=args.debug)


if __name__ == '__main__':
    # Running from a checkout: make src/ importable without installing
    sys.path.insert(0, str(Path(__file__).resolve().parent.parent))
    main()
