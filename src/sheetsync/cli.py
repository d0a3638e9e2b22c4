"""Command-line interface for SheetSync."""

import argparse
import asyncio
import sys

import uvicorn

from .config import settings


def main():
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="SheetSync - shared spreadsheet store with REST and form interfaces"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Server command
    server_parser = subparsers.add_parser("serve", help="Start the web server")
    server_parser.add_argument(
        "--host", default=settings.host, help=f"Host to bind to (default: {settings.host})"
    )
    server_parser.add_argument(
        "--port", type=int, default=settings.port, help=f"Port to bind to (default: {settings.port})"
    )
    server_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )

    # Interactive command
    interactive_parser = subparsers.add_parser(
        "interactive", help="Edit a spreadsheet on a remote store from the terminal"
    )
    interactive_parser.add_argument("spreadsheet", help="Spreadsheet name to open")
    interactive_parser.add_argument(
        "--store-url", default=settings.store_url, help="Base URL of the store web service"
    )

    args = parser.parse_args()

    if args.command == "serve":
        run_server(args.host, args.port, args.reload)
    elif args.command == "interactive":
        asyncio.run(run_interactive(args.spreadsheet, args.store_url))
    else:
        parser.print_help()
        sys.exit(1)


def run_server(host: str, port: int, reload: bool):
    """Run the web server."""
    uvicorn.run(
        "sheetsync.api:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
        log_level=settings.log_level,
    )


HELP = """Commands:
  focus CELL      focus a cell, e.g. "focus b2"
  set FORMULA     set the focused cell to FORMULA
  copy            remember the focused cell for paste
  paste           paste the remembered cell into the focused cell
  delete          delete the focused cell
  clear           clear the whole spreadsheet
  show            print the spreadsheet
  quit            exit"""


def print_view(view: dict):
    """Print a controller view as a text grid."""
    width = 10
    print(view["name"].ljust(width) + "".join(h.rjust(width) for h in view["col_headers"]))
    for header, row in zip(view["row_headers"], view["rows"]):
        print(header.ljust(width) + "".join(str(cell.value).rjust(width) for cell in row))
    if view["focused"]:
        print(f"\n{view['focused']}: {view['formula']}")


async def run_interactive(ss_name: str, store_url: str):
    """Run an interactive session against the store at store_url."""
    from .reactive import SpreadsheetApp
    from .store import StoreClient

    print("SheetSync Interactive Mode")
    print("=" * 40)
    print(HELP)
    print()

    async with StoreClient(store_url) as client:
        app = SpreadsheetApp(client)
        try:
            controller = await app.open(ss_name)
        except ValueError as e:
            print(f"Error: {e}")
            sys.exit(1)

        while True:
            try:
                line = input(f"{controller.state.focused_cell_id.upper() or '-'}> ").strip()
            except EOFError:
                break

            if not line:
                continue

            command, _, arg = line.partition(" ")
            command = command.lower()
            if command in ("quit", "exit"):
                print("Goodbye!")
                break
            elif command == "focus":
                controller.focus(arg.strip())
            elif command == "set":
                await controller.submit_formula(arg)
            elif command == "copy":
                controller.copy()
            elif command == "paste":
                await controller.paste()
            elif command == "delete":
                await controller.delete()
            elif command == "clear":
                await controller.clear()
            elif command == "show":
                print_view(controller.view())
            else:
                print(HELP)

            if controller.state.error:
                print(f"Error: {controller.state.error}")


if __name__ == "__main__":
    main()
