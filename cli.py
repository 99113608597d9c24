"""CLI entrypoint for scripted SCCM client operations."""
from __future__ import annotations

import argparse
import getpass
import json
import logging
import os
import sys
from typing import Sequence

from sccm_client_config.constants import INVENTORY_FIELDS, TASK_NAMES, ClientTask
from sccm_client_config.logging_setup import setup_logging
from sccm_client_config.user_settings import (
    TRANSPORT_CHOICES,
    WINRM_AUTH_CHOICES,
    SettingsStore,
    UserSettings,
)
from services.client_tasks import ClientTaskService
from services.inventory import ComputerInfoService, InventoryResult
from services.privilege import ensure_admin, needs_elevation
from services.provisioning import ProvisioningModeService
from services.remoting import ManagementTransport, RemoteCommandError, build_transport

logger = logging.getLogger("cli")

PASSWORD_ENV_VAR = "SCCM_CLIENT_TOOLS_PASSWORD"


def task_name(value: str) -> str:
    return ClientTask.parse(value).value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="SCCM client administration helpers")
    parser.add_argument("--transport", choices=TRANSPORT_CHOICES, help="Remoting mechanism (default from settings)")
    parser.add_argument("--username", help="WinRM user name")
    parser.add_argument("--port", type=int, help="WinRM port")
    parser.add_argument("--https", action="store_true", default=None, help="Use WinRM over HTTPS")
    parser.add_argument("--auth", choices=WINRM_AUTH_CHOICES, help="WinRM authentication transport")
    parser.add_argument("--log-dir", help="Directory for the debug log file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug output on the console")

    host = argparse.ArgumentParser(add_help=False)
    host.add_argument("-c", "--computer-name", help="Target computer (default: this machine)")

    commands = parser.add_subparsers(dest="command", required=True)

    provisioning = commands.add_parser("provisioning", parents=[host], help="Start or stop provisioning mode")
    provisioning.add_argument("action", type=str.lower, choices=["start", "stop"])

    trigger = commands.add_parser("trigger", parents=[host], help="Trigger client maintenance cycles")
    trigger.add_argument(
        "tasks",
        nargs="+",
        metavar="TASK",
        type=task_name,
        choices=TASK_NAMES,
        help=", ".join(TASK_NAMES))

    inventory = commands.add_parser("inventory", help="Collect hardware and OS inventory")
    inventory.add_argument(
        "-c",
        "--computer-name",
        dest="computer_names",
        nargs="+",
        default=[],
        help="One or more target computers (default: this machine)",
    )
    inventory.add_argument("--json", action="store_true", help="Print records as JSON")

    commands.add_parser("tasks", help="List maintenance cycles and their schedule identifiers")
    return parser


def _resolve_settings(args: argparse.Namespace, store: SettingsStore) -> UserSettings:
    settings = store.load()
    if args.transport:
        settings.transport = args.transport
    if args.username:
        settings.winrm_username = args.username
    if args.port:
        settings.winrm_port = args.port
    if args.https:
        settings.winrm_use_https = True
    if args.auth:
        settings.winrm_auth = args.auth
    return settings


def _resolve_password(settings: UserSettings) -> str:
    if settings.transport != "winrm":
        return ""
    password = os.environ.get(PASSWORD_ENV_VAR)
    if password is None:
        password = getpass.getpass(f"Password for {settings.winrm_username}: ")
    return password


def _print_inventory(results: Sequence[InventoryResult], as_json: bool) -> None:
    if as_json:
        payload = []
        for result in results:
            entry: dict[str, str | None] = {"ComputerName": result.computer_name}
            if result.info is not None:
                entry.update(result.info.to_record())
            else:
                entry["Error"] = result.error
            payload.append(entry)
        print(json.dumps(payload, indent=2))
        return
    width = max(len(name) for name in ("ComputerName",) + INVENTORY_FIELDS)
    for result in results:
        print(f"{'ComputerName':<{width}} : {result.computer_name}")
        if result.info is None:
            print(f"{'Error':<{width}} : {result.error}")
        else:
            for key, value in result.info.to_record().items():
                print(f"{key:<{width}} : {value}")
        print()


def _targets(args: argparse.Namespace) -> list[str | None]:
    if args.command == "inventory":
        return list(args.computer_names) or [None]
    return [args.computer_name]


def main(
    argv: Sequence[str] | None = None,
    *,
    transport: ManagementTransport | None = None,
    settings_store: SettingsStore | None = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(log_dir=args.log_dir, console_level=logging.DEBUG if args.verbose else logging.INFO)

    if args.command == "tasks":
        for task in ClientTask:
            print(f"{task.value:<45} {task.schedule_id}")
        return 0

    if needs_elevation(_targets(args)) and not ensure_admin(interactive=False):
        return 0

    try:
        if transport is None:
            settings = _resolve_settings(args, settings_store or SettingsStore())
            transport = build_transport(settings, password=_resolve_password(settings))

        if args.command == "provisioning":
            ProvisioningModeService(transport).set_mode(args.action, args.computer_name)
        elif args.command == "trigger":
            ClientTaskService(transport).trigger_many(args.tasks, args.computer_name)
        elif args.command == "inventory":
            results = ComputerInfoService(transport).query_many(args.computer_names)
            _print_inventory(results, args.json)
            return 0 if all(result.success for result in results) else 1
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except RemoteCommandError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
