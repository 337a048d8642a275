from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from dokploy_sync.adapters.dokploy.variables import validate_entry
from dokploy_sync.app import (
    delete_application,
    delete_compose,
    delete_database,
    list_variables,
    set_variables,
    show_project,
    unset_variables,
)
from dokploy_sync.config import ConfigurationError, configure_logging
from dokploy_sync.domain.enums import DatabaseType
from dokploy_sync.domain.owners import OwnerRef, application, compose, project

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _add_owner_arguments(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--application", type=str, help="Application id owning the variables")
    group.add_argument("--compose", type=str, help="Compose id owning the variables")
    group.add_argument("--project", type=str, help="Project id owning the shared variables")


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile resources on a Dokploy instance")
    parser.add_argument("--verbose", action="store_true", help="Log every HTTP request")
    subparsers = parser.add_subparsers(dest="command", required=True)

    env = subparsers.add_parser("env", help="Manage environment variables")
    env_sub = env.add_subparsers(dest="env_command", required=True)
    env_list = env_sub.add_parser("list", help="Print the variables of one owner")
    _add_owner_arguments(env_list)
    env_set = env_sub.add_parser("set", help="Set one or more KEY=VALUE pairs")
    _add_owner_arguments(env_set)
    env_set.add_argument("pairs", nargs="+", help="KEY=VALUE assignments")
    env_set.add_argument(
        "--create-env-file",
        action="store_true",
        default=None,
        help="Ask Dokploy to write a .env file (applications only)",
    )
    env_unset = env_sub.add_parser("unset", help="Remove variables by key")
    _add_owner_arguments(env_unset)
    env_unset.add_argument("keys", nargs="+", help="Keys to remove")

    delete = subparsers.add_parser("delete", help="Delete a resource")
    delete_sub = delete.add_subparsers(dest="delete_command", required=True)
    delete_app = delete_sub.add_parser("application", help="Stop and delete an application")
    delete_app.add_argument("id", type=str)
    delete_compose_parser = delete_sub.add_parser("compose", help="Stop and delete a compose")
    delete_compose_parser.add_argument("id", type=str)
    delete_compose_parser.add_argument(
        "--delete-volumes",
        action="store_true",
        help="Also remove the compose volumes",
    )
    delete_db = delete_sub.add_parser("database", help="Delete a database")
    delete_db.add_argument("id", type=str)
    delete_db.add_argument(
        "--type",
        dest="db_type",
        type=str,
        required=True,
        help=f"Database engine ({', '.join(t.value for t in DatabaseType)})",
    )

    project_parser = subparsers.add_parser("project", help="Project commands")
    project_sub = project_parser.add_subparsers(dest="project_command", required=True)
    project_show = project_sub.add_parser("show", help="Print a project and its environments")
    project_show.add_argument("id", type=str)

    return parser.parse_args(list(argv))


def _owner_from_args(args: argparse.Namespace) -> OwnerRef:
    if args.application:
        return application(args.application)
    if args.compose:
        return compose(args.compose)
    return project(args.project)


def _parse_pairs(pairs: Sequence[str]) -> dict[str, str]:
    values: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Expected KEY=VALUE, got {pair!r}")
        validate_entry(key.strip(), value)
        values[key.strip()] = value
    return values


def _print_project(project_id: str) -> None:
    found = show_project(project_id)
    print(f"{found.name} ({found.project_id})")  # noqa: T201
    for environment in found.environments:
        print(f"  {environment.name} ({environment.environment_id})")  # noqa: T201
        for app in environment.applications:
            print(f"    application {app.name} ({app.application_id})")  # noqa: T201
        for item in environment.compose:
            print(f"    compose {item.name} ({item.compose_id})")  # noqa: T201
        for db_type in DatabaseType:
            for database in environment.databases(db_type):
                print(  # noqa: T201
                    f"    {db_type} {database.name} ({database.identifier_for(db_type)})"
                )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
    try:
        owner = _owner_from_args(parsed_args) if parsed_args.command == "env" else None
        values = (
            _parse_pairs(parsed_args.pairs)
            if parsed_args.command == "env" and parsed_args.env_command == "set"
            else {}
        )
        if parsed_args.command == "delete" and parsed_args.delete_command == "database":
            DatabaseType.parse(parsed_args.db_type)
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "env" and owner is not None:
            if parsed_args.env_command == "list":
                for variable in list_variables(owner):
                    print(f"{variable.key}={variable.value}")  # noqa: T201
            elif parsed_args.env_command == "set":
                set_variables(owner, values, create_env_file=parsed_args.create_env_file)
            else:
                unset_variables(owner, parsed_args.keys)
        elif parsed_args.command == "delete":
            if parsed_args.delete_command == "application":
                delete_application(parsed_args.id)
            elif parsed_args.delete_command == "compose":
                delete_compose(parsed_args.id, delete_volumes=parsed_args.delete_volumes)
            else:
                delete_database(parsed_args.id, parsed_args.db_type)
            log.info(f"Deleted {parsed_args.delete_command} {parsed_args.id}")
        elif parsed_args.command == "project" and parsed_args.project_command == "show":
            _print_project(parsed_args.id)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error while talking to Dokploy")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
