import argparse
import logging
from pathlib import Path
from typing import List, Optional
import uvicorn

from devserve.core.config_manager import ConfigError, ConfigManager, ServeConfig
from devserve.preview.live_server import LiveServer

logger = logging.getLogger(__name__)

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="devserve",
        description="Serve a directory and reload the browser when it changes.",
    )
    parser.add_argument("root", nargs="?", default=None,
                        help="Directory to serve (default: current directory)")
    parser.add_argument("-p", "--port", type=int, default=None, help="Port number")
    parser.add_argument("--host", default=None, help="Interface to bind")
    parser.add_argument("--no-markdown", dest="markdown", action="store_false", default=None,
                        help="Do not render page.md for a missing page.html")
    parser.add_argument("--debounce", dest="debounce_delay", type=float, default=None,
                        help="Seconds to collect changes before reloading")
    parser.add_argument("--log-level", default=None,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--config", default=None, help="JSON configuration file")
    return parser

def load_config(argv: Optional[List[str]] = None) -> ServeConfig:
    """Defaults, then the config file, then command-line flags"""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.config and not Path(args.config).is_file():
        parser.error(f"Config file not found: {args.config}")
    try:
        manager = ConfigManager(args.config)
        manager.override(
            root=args.root,
            port=args.port,
            host=args.host,
            markdown=args.markdown,
            debounce_delay=args.debounce_delay,
            log_level=args.log_level,
        )
        return manager.validate()
    except ConfigError as e:
        parser.error(str(e))

def main(argv: Optional[List[str]] = None):
    config = load_config(argv)
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.debug(f"Configuration: {config}")
    server = LiveServer(config)
    uvicorn.run(
        server.app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        access_log=False,
    )

if __name__ == "__main__":
    main()
