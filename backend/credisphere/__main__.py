"""Command line entry point serving the CrediSphere API with uvicorn."""

import argparse
import os
from collections.abc import Sequence

import uvicorn

from credisphere import create_app

# Reload and multi-worker modes need an import string instead of an app object.
APP_FACTORY = "credisphere.app:create_app"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="credisphere",
        description="Serve the CrediSphere club and membership API.",
    )
    parser.add_argument(
        "--env-file",
        default=os.environ.get("ENV_FILE", ".env"),
        help="Environment file read before the process environment (default: %(default)s).",
    )
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    parser.add_argument("--port", type=int, default=3000, help="Port to listen on.")
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart on code changes (development only).",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of worker processes; each opens its own database connection.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    if args.reload or args.workers > 1:
        os.environ["ENV_FILE"] = args.env_file
        uvicorn.run(
            APP_FACTORY,
            factory=True,
            host=args.host,
            port=args.port,
            reload=args.reload,
            workers=args.workers,
        )
        return

    uvicorn.run(create_app(args.env_file), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
