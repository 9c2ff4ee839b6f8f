#!/usr/bin/env python3
"""
Command-line interface for the inventory service
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

LOG_LEVELS = ('critical', 'error', 'warning', 'info', 'debug')


def prepare_cache_dir(cache: Path) -> Optional[Path]:
    """Resolve the photo cache directory, creating it if needed. Returns None on failure."""
    cache_dir = Path(cache).resolve()

    if cache_dir.is_dir():
        return cache_dir

    try:
        cache_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        print(f"❌ Could not create cache directory {cache_dir}: {e}")
        return None

    print(f"✅ Created cache directory: {cache_dir}")
    return cache_dir


def serve_command(host: str, port: int, cache: Path, log_level: str = 'info') -> int:
    """Start the inventory API server."""
    cache_dir = prepare_cache_dir(cache)
    if cache_dir is None:
        return 1

    logging.basicConfig(
        level=log_level.upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    try:
        import uvicorn
        from .api_server import create_app
    except ImportError as e:
        print(f"❌ Missing required package: {e}")
        print("\nInstall API server dependencies:")
        print("  pip install fastapi uvicorn python-multipart")
        return 1

    app = create_app(cache_dir)

    print(f"🚀 Starting Inventory API Server...")
    print(f"📂 Photo cache: {cache_dir}")
    print(f"🌐 Server is running at http://{host}:{port}")
    print(f"📚 Swagger docs at http://{host}:{port}/docs")
    print(f"Press Ctrl+C to stop\n")

    try:
        uvicorn.run(app, host=host, port=port, log_level=log_level)
    except KeyboardInterrupt:
        print("\n\n👋 Server stopped")
    return 0


def build_parser() -> argparse.ArgumentParser:
    # -h is the host option, so help moves to -H
    parser_cli = argparse.ArgumentParser(
        prog='inventory-service',
        description="Inventory Service - track items and their photos over HTTP",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
        epilog="""
Examples:
  # Serve on localhost:3000, storing photos in ./cache
  inventory-service -h 127.0.0.1 -p 3000 -c ./cache

  # Same, with debug logging
  inventory-service -h 0.0.0.0 -p 8080 -c /var/cache/inventory --log-level debug
        """
    )

    parser_cli.add_argument('-H', '--help', action='help', help='Show this help message and exit')
    parser_cli.add_argument('-h', '--host', required=True, help='Address to listen on')
    parser_cli.add_argument('-p', '--port', required=True, type=int, help='Port to listen on')
    parser_cli.add_argument('-c', '--cache', required=True, type=Path, help='Directory for uploaded photos')
    parser_cli.add_argument('--log-level', choices=LOG_LEVELS, default='info', help='Logging level (default: info)')
    return parser_cli


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    args = build_parser().parse_args(argv)
    return serve_command(args.host, args.port, args.cache, args.log_level)


if __name__ == '__main__':
    sys.exit(main())
