#!/usr/bin/env python
"""
Compatibility API Server - HTTP API for the add-on compatibility checker.

Usage:
    python -m compat_checker.server.server --host HOST --port PORT [options]

Arguments:
    --host          Server host (required, e.g., 0.0.0.0 or 127.0.0.1)
    --port          Server port (required, e.g., 8000)
    --store         Cache backend: memory (default) or mongo
    --mongo         MongoDB connection URI (with --store mongo)
    --db            MongoDB database name (with --store mongo)
    --host-version  Version of the running host build
    -v, --verbose   Enable verbose logging
"""

# Load .env file before other imports that might use env vars
from dotenv import load_dotenv
load_dotenv()

import argparse
import ipaddress
import logging
import os
import re
from logging.handlers import RotatingFileHandler


_HOSTNAME_LABEL = re.compile(r"^[A-Za-z0-9]([A-Za-z0-9-]*[A-Za-z0-9])?$")
MONGO_SCHEMES = ("mongodb://", "mongodb+srv://")


def validate_host(value: str) -> str:
    """Accept an IPv4/IPv6 address or a DNS hostname."""
    try:
        ipaddress.ip_address(value)
        return value
    except ValueError:
        pass
    if value and all(_HOSTNAME_LABEL.match(label) for label in value.split(".")):
        return value
    raise argparse.ArgumentTypeError(f"Invalid host: '{value}' (expected an IP address or hostname)")


def validate_port(value: str) -> int:
    if not value.isdigit() or not 1 <= int(value) <= 65535:
        raise argparse.ArgumentTypeError(f"Invalid port: '{value}' (expected 1-65535)")
    return int(value)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Start Add-on Compatibility API Server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m compat_checker.server.server --host 127.0.0.1 --port 8000
    python -m compat_checker.server.server --host 0.0.0.0 --port 8000 --store mongo --mongo mongodb://localhost:27017 --db compat_db -v
        """
    )
    parser.add_argument("--host", required=True, type=validate_host,
                        help="Server host (e.g., 0.0.0.0 or 127.0.0.1)")
    parser.add_argument("--port", required=True, type=validate_port,
                        help="Server port (e.g., 8000)")
    parser.add_argument("--store", choices=["memory", "mongo"], default=None,
                        help="Cache backend (default: COMPAT_STORE or memory)")
    parser.add_argument("--mongo", default=None,
                        help="MongoDB connection URI (e.g., mongodb://localhost:27017)")
    parser.add_argument("--db", default=None,
                        help="MongoDB database name (e.g., compat_db)")
    parser.add_argument("--host-version", default=None,
                        help="Version of the running host build (e.g., 128.5.0esr)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable verbose logging (DEBUG level)")
    return parser


def configure_logging(verbose: bool) -> str:
    """Console logging plus a rotating file; returns the log file path."""
    log_dir = os.environ.get('LOG_DIR', os.path.join(os.getcwd(), 'logs'))
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, 'compat_server.log')

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=5*1024*1024,  # 5MB
        backupCount=3,
        encoding='utf-8'
    )
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    compat_logger = logging.getLogger('compat')
    compat_logger.addHandler(file_handler)

    # Suppress chatty loggers even with -v
    logging.getLogger('pymongo').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    return log_file


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    store = args.store or os.environ.get("COMPAT_STORE", "memory")
    if (args.mongo or args.db) and store != "mongo":
        parser.error("--mongo and --db require --store mongo")
    if args.mongo and not args.mongo.startswith(MONGO_SCHEMES):
        parser.error(f"--mongo must start with one of {', '.join(MONGO_SCHEMES)}")

    log_file = configure_logging(args.verbose)
    print(f"Logs written to: {log_file}")

    # The app reads its settings from the environment on startup
    if args.store:
        os.environ["COMPAT_STORE"] = args.store
    if args.mongo:
        os.environ["MONGODB_URI"] = args.mongo
    if args.db:
        os.environ["MONGODB_DATABASE"] = args.db
    if args.host_version:
        os.environ["COMPAT_HOST_VERSION"] = args.host_version
    if args.verbose:
        os.environ["COMPAT_DEBUG"] = "1"

    import uvicorn

    print("=" * 60)
    print("Add-on Compatibility API Server")
    print("=" * 60)
    print(f"  Host: {args.host}")
    print(f"  Port: {args.port}")
    print(f"  Store: {os.environ.get('COMPAT_STORE', 'memory')}")
    print("=" * 60)

    uvicorn.run(
        "compat_checker.server.app:app",
        host=args.host,
        port=args.port,
        log_level="debug" if args.verbose else "info",
    )


if __name__ == "__main__":
    main()
