"""Command line entry point."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from cloudwright import __version__
from cloudwright.cli.resources import KIND_CHOICES
from cloudwright.config.settings import get_settings
from cloudwright.logging import configure_logging


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config-file", dest="config_path", help="Path to config.yaml")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cloudwright",
        description="Manage agent platform resources and serve them as MCP tools",
    )
    parser.add_argument("--version", action="version", version=f"cloudwright {__version__}")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")

    serve_parser = subparsers.add_parser("serve", help="Run the MCP server over stdio")
    serve_parser.add_argument(
        "--read-only", action="store_true", help="Only expose read (list and get) tools"
    )
    serve_parser.add_argument(
        "--toolsets",
        help="Comma-separated toolsets: agents,jobs,modelapis,mcpservers,sandboxes,integrations or all",
    )
    _add_common(serve_parser)

    create_parser = subparsers.add_parser("create", help="Create a resource")
    create_parser.add_argument("kind", choices=sorted(KIND_CHOICES), help="Resource kind")
    create_parser.add_argument("name", help="Resource name")
    create_parser.add_argument("--integration", help="Existing integration connection to use")
    create_parser.add_argument(
        "--integration-type", help="Create an inline integration of this type"
    )
    create_parser.add_argument(
        "--secret", action="append", dest="secrets", metavar="KEY=VALUE",
        help="Inline integration secret (repeatable)",
    )
    create_parser.add_argument(
        "--config", action="append", dest="config", metavar="KEY=VALUE",
        help="Inline integration config (repeatable)",
    )
    create_parser.add_argument("--provider", help="Model provider (model APIs)")
    create_parser.add_argument("--api-key", help="Provider API key (model APIs)")
    create_parser.add_argument("--model", help="Model name (model APIs)")
    create_parser.add_argument("--endpoint", help="Model endpoint (model APIs)")
    create_parser.add_argument("--image", help="Container image")
    create_parser.add_argument("--memory", type=int, help="Memory in MB")
    create_parser.add_argument("--ports", help="Comma-separated ports (sandboxes)")
    create_parser.add_argument("--env", help="Environment variables, NAME=VALUE,...")
    create_parser.add_argument(
        "--no-wait", action="store_true", help="Return once the create call is accepted"
    )
    _add_common(create_parser)

    delete_parser = subparsers.add_parser("delete", help="Delete a resource")
    delete_parser.add_argument("kind", choices=sorted(KIND_CHOICES), help="Resource kind")
    delete_parser.add_argument("name", help="Resource name")
    delete_parser.add_argument(
        "--no-wait", action="store_true", help="Return once the delete call is accepted"
    )
    _add_common(delete_parser)

    list_parser = subparsers.add_parser("list", help="List resources of one kind")
    list_parser.add_argument("kind", choices=sorted(KIND_CHOICES), help="Resource kind")
    list_parser.add_argument("--filter", dest="name_filter", help="Only names containing this text")
    _add_common(list_parser)

    get_parser = subparsers.add_parser("get", help="Show a resource")
    get_parser.add_argument("kind", choices=sorted(KIND_CHOICES), help="Resource kind")
    get_parser.add_argument("name", help="Resource name")
    _add_common(get_parser)

    return parser


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    debug = args.debug or get_settings().debug
    configure_logging(logging.DEBUG if debug else logging.WARNING)

    if args.command == "serve":
        from cloudwright.cli.serve import serve_command

        sys.exit(
            serve_command(
                read_only=args.read_only,
                toolsets=args.toolsets,
                config_path=args.config_path,
            )
        )

    if args.command == "create":
        from cloudwright.cli.resources import create_command

        sys.exit(
            create_command(
                args.kind,
                args.name,
                wait=not args.no_wait,
                config_path=args.config_path,
                integration=args.integration,
                integration_type=args.integration_type,
                secrets=args.secrets,
                config=args.config,
                provider=args.provider,
                api_key=args.api_key,
                model=args.model,
                endpoint=args.endpoint,
                image=args.image,
                memory=args.memory,
                ports=args.ports,
                env=args.env,
            )
        )

    if args.command == "delete":
        from cloudwright.cli.resources import delete_command

        sys.exit(
            delete_command(
                args.kind, args.name, wait=not args.no_wait, config_path=args.config_path
            )
        )

    if args.command == "list":
        from cloudwright.cli.resources import list_command

        sys.exit(list_command(args.kind, args.name_filter, config_path=args.config_path))

    if args.command == "get":
        from cloudwright.cli.resources import get_command

        sys.exit(get_command(args.kind, args.name, config_path=args.config_path))

    parser.print_help()
    sys.exit(1)


if __name__ == "__main__":
    main()
