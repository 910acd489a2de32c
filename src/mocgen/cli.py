"""CLI for mocgen - render Map-of-Content notes from a markdown vault."""

import argparse
import json
import logging
import platform
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

from . import __version__
from .config import parse_index_spec
from .export.note import NoteExporter
from .runtime import Runtime, build_runtime


def version_string() -> str:
    return (
        f"mocgen {__version__} "
        f"(python {platform.python_version()}, platform {platform.system().lower()})"
    )


def _folders(args: argparse.Namespace, rt: Runtime) -> list[str]:
    return list(getattr(args, "folder", None) or rt.config.moc.folders)


def _indices(args: argparse.Namespace, rt: Runtime) -> list[Any]:
    specs = getattr(args, "index", None)
    if specs:
        configs = [parse_index_spec(s) for s in specs]
    else:
        configs = rt.config.moc.indices
    if getattr(args, "hide_singleton", False):
        configs = [replace(ic, hide_singleton=True) for ic in configs]
    return [ic.to_spec() for ic in configs]


def _out_path(args: argparse.Namespace, rt: Runtime) -> Path | None:
    out = getattr(args, "out", None)
    if out:
        return Path(out)
    return rt.config.moc.out


def cmd_render(args: argparse.Namespace, rt: Runtime) -> int:
    """Render the MOC to stdout or into a target note."""
    folders = _folders(args, rt)
    if not folders:
        print("Error: No folders given (use --folder or [moc] folders)", file=sys.stderr)
        return 1

    document = rt.render(folders, _indices(args, rt))

    out = _out_path(args, rt)
    if out is None:
        print(document)
        return 0

    NoteExporter(out).export(document)
    if not args.quiet:
        print(f"Wrote {out}")
    return 0


def cmd_ls(args: argparse.Namespace, rt: Runtime) -> int:
    """List a folder's pages, newest first."""
    pages = rt.builder().build_pages(args.folder)

    if args.json:
        result = [
            {
                "path": p.path,
                "title": p.meta.get("title") or p.basename,
                "ctime": p.ctime,
                "tags": p.formula.tags,
            }
            for p in pages
        ]
        print(json.dumps(result, indent=2, ensure_ascii=False))
    else:
        for p in pages:
            print(f"{p.ctime or '-'}\t{p.path}")

    return 0


def cmd_watch(args: argparse.Namespace, rt: Runtime) -> int:
    """Watch vault for changes and re-render the MOC."""
    from .watch import watch_vault

    folders = _folders(args, rt)
    out = _out_path(args, rt)
    if not folders or out is None:
        print("Error: watch needs folders and an output note (--out)", file=sys.stderr)
        return 1

    indices = _indices(args, rt)
    exporter = NoteExporter(out)

    def render() -> None:
        exporter.export(rt.render(folders, indices))

    render()
    return watch_vault(
        vault_path=rt.vault_path,
        render=render,
        debounce_ms=getattr(args, "debounce_ms", 150),
        quiet=args.quiet,
        json_output=args.json,
        ignore={out},
    )


def cmd_serve(args: argparse.Namespace, rt: Runtime) -> int:
    """Start local HTTP server."""
    import uvicorn

    from .api.app import create_app, generate_token

    token_arg = getattr(args, "token", "auto")
    token = None

    if token_arg == "auto":
        token = generate_token()
        print(f"Generated bearer token: {token}")
        print(f"Use in requests: Authorization: Bearer {token}")
    elif token_arg == "none":
        print("Warning: Running without authentication. Only use in trusted environments.")
        token = None
    else:
        token = token_arg

    app = create_app(rt, token=token, enable_cors=getattr(args, "cors", False))

    host = getattr(args, "host", "127.0.0.1")
    port = getattr(args, "port", 8765)

    print(f"Starting server on http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level="info")

    return 0


def _add_selection_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--folder",
        action="append",
        default=None,
        help="Folder prefix to include (repeatable, default: [moc] folders)",
    )
    p.add_argument(
        "--index",
        action="append",
        default=None,
        metavar="FIELD[:LABEL]",
        help="Add a cross-reference index, e.g. categories:Category (repeatable)",
    )
    p.add_argument(
        "--hide-singleton",
        action="store_true",
        help="Drop index entries referenced by a single note",
    )
    p.add_argument("--out", help="Target note to write (default: [moc] out)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="moc", description="Render Map-of-Content notes from a markdown vault"
    )
    parser.add_argument(
        "--version", action="version", version=version_string()
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: search cwd/moc.toml, vault/moc.toml)",
    )
    parser.add_argument(
        "--vault",
        type=Path,
        default=None,
        help="Path to vault directory (overrides config)",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Minimize output"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Debug logging"
    )
    parser.add_argument(
        "--json", action="store_true", help="Machine-readable output"
    )

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    # render command
    parser_render = subparsers.add_parser("render", help="Render the MOC")
    _add_selection_args(parser_render)

    # ls command
    parser_ls = subparsers.add_parser("ls", help="List a folder's pages")
    parser_ls.add_argument("folder", help="Folder prefix")

    # watch command
    parser_watch = subparsers.add_parser("watch", help="Re-render on vault changes")
    _add_selection_args(parser_watch)
    parser_watch.add_argument(
        "--debounce-ms", type=int, default=150,
        help="Debounce window in milliseconds (default: 150)"
    )

    # serve command
    parser_serve = subparsers.add_parser("serve", help="Start local HTTP server")
    parser_serve.add_argument(
        "--host", default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)"
    )
    parser_serve.add_argument(
        "--port", type=int, default=8765,
        help="Port to bind to (default: 8765)"
    )
    parser_serve.add_argument(
        "--token", default="auto",
        help="Bearer token (auto|<string>|none, default: auto)"
    )
    parser_serve.add_argument(
        "--cors", action="store_true",
        help="Enable CORS (default: false)"
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        log_level = logging.DEBUG
    elif args.quiet:
        log_level = logging.WARNING
    else:
        log_level = logging.INFO
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")

    rt = build_runtime(vault_path=args.vault, config_path=args.config)
    if not rt.vault_path.is_dir():
        print(f"Error: Vault not found: {rt.vault_path}", file=sys.stderr)
        sys.exit(1)

    handlers = {
        "render": cmd_render,
        "ls": cmd_ls,
        "watch": cmd_watch,
        "serve": cmd_serve,
    }

    handler = handlers.get(args.cmd)
    if handler:
        try:
            exit_code = handler(args, rt)
            sys.exit(exit_code)
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        print(f"Unknown command: {args.cmd}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
