#!/usr/bin/env python3
"""
Scanned PDF Redaction Service.
Supports CLI and server modes.
"""
import sys
import argparse
import logging

from scanredact.cli import LOG_FORMAT, main as cli_main


def server_mode(host: str, port: int):
    """Launch the FastAPI server."""
    import uvicorn
    from scanredact.adapters.fastapi_adapter import app

    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    print(f"Starting server on {host}:{port}")
    print(f"API Documentation: http://{host}:{port}/docs")

    uvicorn.run(app, host=host, port=port, log_level="info")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Scanned PDF Redaction Service")
    subparsers = parser.add_subparsers(dest="mode", help="Execution mode")

    server_parser = subparsers.add_parser("server", help="Launch the API server")
    server_parser.add_argument("--host", default="127.0.0.1", help="Server IP address")
    server_parser.add_argument("--port", type=int, default=8000, help="Server port")

    # Everything after "cli" is handed to the CLI parser untouched
    subparsers.add_parser("cli", help="Command line mode", add_help=False)

    args, remaining = parser.parse_known_args()

    if args.mode == "server":
        server_mode(args.host, args.port)
        return 0
    elif args.mode == "cli":
        return cli_main(remaining)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
