# printboard/app/main.py
"""Command line entry point for the print request board."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from ..adapters.storage_local import StorageLocal
from ..domain.cards import Card
from ..domain.ports import UseCaseError
from ..usecases.error_mapping import map_api_error
from ..utils.logging import configure_root
from ..viewmodels.settings_vm import SettingsVM
from .card_workflow import CardWorkflow
from .controller import AppController, load_settings

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = os.path.join("~", ".printboard")


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse CLI args."""
    parser = argparse.ArgumentParser(description="Track 3D print requests stored in SharePoint.")
    parser.add_argument("--config-dir", default=DEFAULT_CONFIG_DIR)
    parser.add_argument("--debug", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)
    cfg_cmd = sub.add_parser("configure")
    cfg_cmd.add_argument("--site-id")
    cfg_cmd.add_argument("--site-url")
    cfg_cmd.add_argument("--list-name")
    cfg_cmd.add_argument("--images-library")
    cfg_cmd.add_argument("--client-id")
    cfg_cmd.add_argument("--authority")
    cfg_cmd.add_argument("--debug-logging", choices=("on", "off"))
    sub.add_parser("login")
    sub.add_parser("logout")
    sub.add_parser("check")
    sub.add_parser("list")
    sub.add_parser("report")
    for name in ("show", "advance", "delete"):
        cmd = sub.add_parser(name)
        cmd.add_argument("card_id")
    return parser.parse_args(argv)


def _format_card(card: Card) -> str:
    money = ""
    if card.profit_loss is not None:
        sign = "+" if card.is_profitable else ""
        money = f"  {sign}{card.profit_loss:.2f}"
    return f"{card.id:>6}  {card.status.value:<18} {card.title}  ({card.quantity}x {card.part_name}){money}"


def _print_report(workflow: CardWorkflow) -> None:
    report = workflow.report()
    print(f"Total requests: {report.total}")
    for status, count in report.by_status:
        print(f"  {status.value:<18} {count}")
    print("By department:")
    for department, count in report.by_department:
        print(f"  {department:<18} {count}")
    print(f"Savings: {report.total_savings:.2f} ({report.profitable_count} finished cards)")
    print(f"Losses:  {report.total_loss:.2f} ({report.unprofitable_count} finished cards)")


def configure(args: argparse.Namespace, storage: StorageLocal) -> int:
    """Merge the given options into the saved prefs (environment not applied)."""
    settings_vm = SettingsVM(on_save=storage.save_user_prefs)
    prefs = storage.load_user_prefs()
    if prefs:
        settings_vm.apply_dict(prefs)
    keys = (
        "site_id",
        "site_url",
        "list_name",
        "images_library",
        "client_id",
        "authority",
        "debug_logging",
    )
    updates = {key: getattr(args, key) for key in keys if getattr(args, key) is not None}
    if updates:
        settings_vm.apply_dict(updates)
    try:
        settings_vm.cmd_save()
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 2
    for problem in settings_vm.problems():
        print(f"warning: {problem}", file=sys.stderr)
    print(f"Saved {storage.prefs_path}")
    return 0


def run(args: argparse.Namespace, controller: AppController) -> int:
    if not controller.ensure_ready():
        print("Sign-in is not configured: set PRINTBOARD_CLIENT_ID.", file=sys.stderr)
        return 2
    auth = controller.auth
    workflow = controller.workflow
    assert auth is not None and workflow is not None

    if args.command == "login":
        account = auth.login()
        print(f"Signed in as {account.username or account.name}")
        return 0
    if args.command == "logout":
        auth.logout()
        print("Signed out")
        return 0
    if args.command == "check":
        assert controller.store is not None
        controller.store.set_auth_token(auth.get_token())
        print(f"Connection OK: {controller.store.check_connection()} requests readable")
        return 0

    workflow.refresh()
    if args.command == "list":
        for card in workflow.cards:
            print(_format_card(card))
    elif args.command == "report":
        _print_report(workflow)
    elif args.command == "show":
        card = workflow.get_card_by_id(args.card_id)
        if card is None:
            print(f"No request with id {args.card_id}", file=sys.stderr)
            return 1
        print(_format_card(card))
        print(f"  requested by {card.requester_name} ({card.department}) on {card.request_date:%Y-%m-%d}")
        if card.deadline:
            print(f"  deadline {card.deadline:%Y-%m-%d}")
        if card.part_description:
            print(f"  {card.part_description}")
    elif args.command == "advance":
        card = workflow.advance_status(args.card_id)
        print(_format_card(card))
    elif args.command == "delete":
        workflow.delete_card(args.card_id)
        print(f"Deleted {args.card_id}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entrypoint."""
    args = _parse_args(argv)
    configure_root(logging.DEBUG if args.debug else logging.WARNING)
    storage = StorageLocal(os.path.expanduser(args.config_dir))
    if args.command == "configure":
        return configure(args, storage)
    try:
        settings_vm = load_settings(storage)
        if settings_vm.debug_logging and not args.debug:
            configure_root(logging.DEBUG)
        controller = AppController(settings_vm, token_cache_path=storage.token_cache_path)
        return run(args, controller)
    except Exception as exc:
        mapped: UseCaseError = map_api_error(exc, default_code="COMMAND_FAILED")
        LOGGER.debug("Command %s failed", args.command, exc_info=True)
        print(f"{mapped.code}: {mapped.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
