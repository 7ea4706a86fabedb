"""
Command-line front end for domorest.

Examples:
    domorest datasets list --limit 5 --sort -lastUpdated
    domorest datasets info 8a0e9c9c-...
    domorest datasets query 8a0e9c9c-... "SELECT * FROM table LIMIT 10"
    domorest datasets export 8a0e9c9c-... --headers -o rows.csv
    domorest datasets upload 8a0e9c9c-... rows.csv
    domorest datasets delete 8a0e9c9c-...

Credentials are read from DOMO_CLIENT_ID / DOMO_CLIENT_SECRET (or an env
file given with --env-file), or from a JSON file given with --config.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from . import __version__
from .client import DomoClient
from .config import ClientConfig
from .errors import DomoError
from .utils.logging import setup_logging

logger = logging.getLogger("domorest.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="domorest",
        description="Domo DataSet API client",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("Examples:", 1)[1],
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--env-file", default=".env", help="Env file with credentials (default: .env)"
    )
    parser.add_argument("--config", default=None, help="JSON config file (overrides environment)")
    parser.add_argument("--log-level", default="WARNING", help="Log level (default: WARNING)")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines")

    resources = parser.add_subparsers(dest="resource", required=True)
    datasets = resources.add_parser("datasets", help="DataSet operations")
    actions = datasets.add_subparsers(dest="action", required=True)

    list_parser = actions.add_parser("list", help="List DataSets")
    list_parser.add_argument("--limit", type=int, default=50)
    list_parser.add_argument("--offset", type=int, default=None)
    list_parser.add_argument("--sort", default="name")

    info_parser = actions.add_parser("info", help="Show DataSet metadata")
    info_parser.add_argument("dataset_id")

    delete_parser = actions.add_parser("delete", help="Delete a DataSet")
    delete_parser.add_argument("dataset_id")

    query_parser = actions.add_parser("query", help="Run SQL against a DataSet")
    query_parser.add_argument("dataset_id")
    query_parser.add_argument("sql")

    export_parser = actions.add_parser("export", help="Export DataSet rows as CSV")
    export_parser.add_argument("dataset_id")
    export_parser.add_argument("--headers", action="store_true", help="Include a header row")
    export_parser.add_argument("-o", "--output", default=None, help="Output file (default: stdout)")

    upload_parser = actions.add_parser("upload", help="Replace DataSet rows from a CSV file")
    upload_parser.add_argument("dataset_id")
    upload_parser.add_argument("csv_file", help="CSV file without header row ('-' for stdin)")

    return parser


def load_config(args: argparse.Namespace) -> ClientConfig:
    if args.config:
        return ClientConfig.from_file(args.config)
    return ClientConfig.from_env(env_file=args.env_file)


async def run(args: argparse.Namespace, config: ClientConfig) -> Any:
    """Execute one dataset action and return what should be printed."""
    async with DomoClient(config) as domo:
        datasets = domo.datasets()

        if args.action == "list":
            builder = datasets.list().limit(args.limit).sort(args.sort)
            if args.offset is not None:
                builder.offset(args.offset)
            return [d.model_dump(mode="json") for d in await builder.execute()]

        if args.action == "info":
            return (await datasets.info(args.dataset_id)).model_dump(mode="json")

        if args.action == "delete":
            await datasets.delete(args.dataset_id)
            return {"deleted": args.dataset_id}

        if args.action == "query":
            result = await datasets.query_data(args.dataset_id, args.sql).execute()
            return result.model_dump(mode="json", by_alias=True)

        if args.action == "export":
            builder = datasets.get_data(args.dataset_id)
            if args.headers:
                builder.with_csv_headers()
            return await builder.execute()

        if args.action == "upload":
            if args.csv_file == "-":
                csv_text = sys.stdin.read()
            else:
                csv_text = Path(args.csv_file).read_text(encoding="utf-8")
            await datasets.upload(args.dataset_id).csv_str(csv_text).execute()
            return {"uploaded": args.dataset_id, "bytes": len(csv_text.encode("utf-8"))}

    raise ValueError(f"Unknown action: {args.action}")


def write_output(result: Any, output: str | None = None) -> None:
    if isinstance(result, bytes):
        if output:
            Path(output).write_bytes(result)
        else:
            sys.stdout.buffer.write(result)
            sys.stdout.flush()
        return
    sys.stdout.write(json.dumps(result, indent=2, default=str) + "\n")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level, use_json=args.json_logs)

    try:
        config = load_config(args)
        result = asyncio.run(run(args, config))
    except DomoError as e:
        logger.error("%s", e)
        return 1
    except (OSError, ValueError) as e:
        logger.error("%s", e)
        return 2

    write_output(result, getattr(args, "output", None))
    return 0


if __name__ == "__main__":
    sys.exit(main())
