"""``credisphere-admin``: command line access to the admin API."""

import argparse
import json
import os
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from .api import ApiClient, ApiError
from .resources import RESOURCES, ExportableResourceClient

DEFAULT_URL = "http://localhost:3000"
MAX_CELL_WIDTH = 40

TABLE_COLUMNS = {
    "clubs": ("id", "clubName", "city", "mobile", "email"),
    "groups": ("id", "groupName", "gender", "age"),
    "competitions": ("id", "competitionName", "date", "age", "lastEntryDate"),
    "parties": ("id", "partyName", "accountNumber", "mobile1"),
    "players": ("id", "uniqueIdNumber", "firstName", "lastName", "mobile", "isSuspended"),
    "users": ("id", "name", "email", "role", "active"),
    "day-closes": ("id", "closedAt", "note", "createdBy"),
    "site-settings": ("id", "key", "value"),
}


def _cell(value: Any) -> str:
    text = "" if value is None else str(value)
    if len(text) > MAX_CELL_WIDTH:
        return text[: MAX_CELL_WIDTH - 3] + "..."
    return text


def render_table(rows: Sequence[dict[str, Any]], columns: Sequence[str]) -> str:
    """Render rows as a fixed width text table."""
    cells = [[_cell(row.get(column)) for column in columns] for row in rows]
    widths = [
        max([len(column), *(len(line[index]) for line in cells)])
        for index, column in enumerate(columns)
    ]
    lines = [
        "  ".join(column.ljust(width) for column, width in zip(columns, widths, strict=True)),
        "  ".join("-" * width for width in widths),
    ]
    lines.extend(
        "  ".join(cell.ljust(width) for cell, width in zip(line, widths, strict=True))
        for line in cells
    )
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="credisphere-admin",
        description="Manage CrediSphere records from the command line.",
    )
    parser.add_argument(
        "--url",
        default=os.environ.get("CREDISPHERE_URL", DEFAULT_URL),
        help="Server URL (default: $CREDISPHERE_URL or %(default)s).",
    )
    parser.add_argument(
        "--token",
        default=os.environ.get("CREDISPHERE_TOKEN"),
        help="Bearer token (default: $CREDISPHERE_TOKEN).",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    login = commands.add_parser("login", help="Log in and print a token.")
    login.add_argument("email")
    login.add_argument("password")

    list_parser = commands.add_parser("list", help="List one page of records.")
    list_parser.add_argument("resource", choices=sorted(RESOURCES))
    list_parser.add_argument("--page", type=int, default=1)
    list_parser.add_argument("--limit", type=int, default=10)
    list_parser.add_argument("--search", default="")
    list_parser.add_argument("--sort-by")
    list_parser.add_argument("--sort-order", choices=("asc", "desc"), default="asc")

    get = commands.add_parser("get", help="Show one record as JSON.")
    get.add_argument("resource", choices=sorted(RESOURCES))
    get.add_argument("id")

    delete = commands.add_parser("delete", help="Delete one record.")
    delete.add_argument("resource", choices=sorted(RESOURCES))
    delete.add_argument("id", type=int)

    export = commands.add_parser("export", help="Download an xlsx export.")
    exportable = sorted(
        name for name, client in RESOURCES.items() if issubclass(client, ExportableResourceClient)
    )
    export.add_argument("resource", choices=exportable)
    export.add_argument("--search", default="")
    export.add_argument("--output", type=Path)

    return parser


def run(args: argparse.Namespace, api: ApiClient) -> str:
    """Execute one parsed command and return what to print."""
    if args.command == "login":
        user = api.login(args.email, args.password)
        return f"Logged in as {user['name']} ({user['role']})\n{api.token}"

    client = RESOURCES[args.resource](api)
    columns = TABLE_COLUMNS[args.resource]

    if args.command == "list":
        page = client.list(
            page=args.page,
            limit=args.limit,
            search=args.search,
            sort_by=args.sort_by,
            sort_order=args.sort_order,
        )
        if isinstance(page, list):
            return render_table(page, columns)
        footer = f"Page {page['page']} of {page['totalPages']} ({page['totalCount']} records)"
        return f"{render_table(page['items'], columns)}\n{footer}"

    if args.command == "get":
        record_id = args.id
        if args.resource == "site-settings":
            record = client.get_by_key(record_id)
        else:
            record = client.get(int(record_id))
        return json.dumps(record, indent=2, ensure_ascii=False)

    if args.command == "delete":
        return client.delete(args.id)["message"]

    content = client.export(search=args.search)
    output = args.output or Path(f"{args.resource}.xlsx")
    output.write_bytes(content)
    return f"Wrote {len(content)} bytes to {output}"


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    with ApiClient(args.url, token=args.token) as api:
        try:
            print(run(args, api))
        except ApiError as e:
            print(e.message, file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
