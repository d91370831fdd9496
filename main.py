#!/usr/bin/env python3
"""
twitter-datasource: bounded tweet search over Twitter's paginated REST API.

Usage:
    python main.py search "query" [--count N] [--type recent] [--lang en]
                                  [--since YYYY-MM-DD] [--until YYYY-MM-DD]
                                  [--address "..."] [--radius 5] [--unit km] [--json]
    python main.py execute [request.json]   # JSON envelope from file or stdin
    python main.py metadata                 # Print the datasource descriptor
    python main.py serve                    # Start the HTTP API
"""

import argparse
import logging
import sys
from pathlib import Path

from collectors import AuthenticationError, CollectionCancelled, ProviderError
from config import ConfigurationError, load_config
from delivery import deliver_cli
from geo import ResolutionError
from query import SearchParams
from service.datasource import EmptyResultError, TwitterDatasource


def setup_logging(verbose: bool = False):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def cmd_search(datasource: TwitterDatasource, args) -> int:
    """Search and print tweets. Returns process exit code."""
    params = SearchParams(
        query=args.query,
        result_type=args.type,
        lang=args.lang,
        since=args.since,
        until=args.until,
        address=args.address,
        radius=args.radius,
        unit=args.unit,
        count=args.count,
    )

    try:
        result = datasource.search(params)
    except EmptyResultError as e:
        print(str(e))
        return 0
    except (
        ConfigurationError,
        AuthenticationError,
        ResolutionError,
        ProviderError,
        CollectionCancelled,
        ValueError,
    ) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    deliver_cli(result, as_json=args.json)
    return 0


def cmd_execute(datasource: TwitterDatasource, path: str | None):
    """Run a raw JSON envelope through the datasource."""
    if path:
        body = Path(path).read_text(encoding="utf-8")
    else:
        body = sys.stdin.read()
    print(datasource.execute(body))


def cmd_serve(datasource: TwitterDatasource, args):
    """Start the HTTP API server."""
    from api.server import create_app

    app = create_app(datasource)
    print(f"Starting server at http://{args.host}:{args.port}")
    app.run(host=args.host, port=args.port, debug=args.verbose)


def cli():
    parser = argparse.ArgumentParser(
        prog="tweets",
        description="Bounded tweet search over Twitter's paginated REST API",
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")

    sub = parser.add_subparsers(dest="command", help="Command to run")

    search_parser = sub.add_parser("search", parents=[common], help="Search tweets")
    search_parser.add_argument("query", help="Search query text")
    search_parser.add_argument("--count", type=int, default=15, help="Tweets to return (default 15)")
    search_parser.add_argument(
        "--type", type=str, default="mixed", choices=["mixed", "popular", "recent"],
        help="Result ordering (default mixed)",
    )
    search_parser.add_argument("--lang", type=str, default=None, help="ISO 639-1 language code")
    search_parser.add_argument("--since", type=str, default=None, help="Earliest date, YYYY-MM-DD")
    search_parser.add_argument("--until", type=str, default=None, help="Latest date (exclusive), YYYY-MM-DD")
    search_parser.add_argument("--address", type=str, default=None, help="Restrict to tweets near this address")
    search_parser.add_argument("--radius", type=float, default=0.0, help="Radius around --address (default 10)")
    search_parser.add_argument("--unit", type=str, default="mi", choices=["mi", "km"], help="Radius unit")
    search_parser.add_argument("--json", action="store_true", help="Print JSON instead of text lines")

    execute_parser = sub.add_parser("execute", parents=[common], help="Run a JSON request envelope")
    execute_parser.add_argument(
        "path", nargs="?", default=None,
        help="Envelope file. If omitted, reads stdin.",
    )

    sub.add_parser("metadata", parents=[common], help="Print datasource metadata")

    serve_parser = sub.add_parser("serve", parents=[common], help="Start HTTP API server")
    serve_parser.add_argument("--port", type=int, default=5002, help="Port (default 5002)")
    serve_parser.add_argument("--host", type=str, default="127.0.0.1", help="Host (default 127.0.0.1)")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging(args.verbose)
    datasource = TwitterDatasource(load_config())

    match args.command:
        case "search":
            sys.exit(cmd_search(datasource, args))
        case "execute":
            cmd_execute(datasource, args.path)
        case "metadata":
            print(datasource.get_metadata())
        case "serve":
            cmd_serve(datasource, args)
        case _:
            parser.print_help()


if __name__ == "__main__":
    cli()
