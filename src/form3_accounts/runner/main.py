"""
CLI main entry point.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from ..accounts_client import AccountsClient, Form3Error, ListAccountsParams
from ..config import Config, create_default_config, load_config
from ..schemas.account import Account, AccountAttributes

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_cli() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="form3-accounts",
        description="Manage accounts through the Form3 accounts API",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=Path("config.yaml"),
        help="Path to config file (default: config.yaml)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # init command
    subparsers.add_parser("init", help="Write a default config file")

    # get command
    get_parser = subparsers.add_parser("get", help="Fetch one account")
    get_parser.add_argument("account_id", type=str, help="Account ID")

    # create command
    create_parser = subparsers.add_parser("create", help="Create an account")
    create_parser.add_argument(
        "--organisation-id",
        type=str,
        required=True,
        help="Owning organisation ID",
    )
    create_parser.add_argument(
        "--id",
        dest="account_id",
        type=str,
        default=None,
        help="Account ID (default: random UUID)",
    )
    create_parser.add_argument("--country", type=str, help="ISO country code, e.g. GB")
    create_parser.add_argument("--base-currency", type=str, help="ISO currency code, e.g. GBP")
    create_parser.add_argument("--account-number", type=str)
    create_parser.add_argument("--bank-id", type=str)
    create_parser.add_argument("--bank-id-code", type=str)
    create_parser.add_argument("--bic", type=str)
    create_parser.add_argument("--iban", type=str)
    create_parser.add_argument(
        "--name",
        action="append",
        help="Account holder name line (repeatable)",
    )
    create_parser.add_argument("--account-classification", type=str)
    create_parser.add_argument("--status", type=str)
    create_parser.add_argument(
        "--joint-account",
        action="store_true",
        default=None,
        help="Mark as joint account",
    )
    create_parser.add_argument(
        "--no-attributes",
        action="store_true",
        help="Send the account without attributes",
    )

    # delete command
    delete_parser = subparsers.add_parser("delete", help="Delete an account")
    delete_parser.add_argument("account_id", type=str, help="Account ID")
    delete_parser.add_argument(
        "--version",
        type=int,
        required=True,
        help="Current account version",
    )

    # list command
    list_parser = subparsers.add_parser("list", help="List accounts")
    list_parser.add_argument(
        "--page-number",
        type=int,
        default=0,
        help="First page to fetch, 0-based (default: 0)",
    )
    list_parser.add_argument(
        "--page-size",
        type=int,
        default=None,
        help="Accounts per page (default: from config)",
    )
    list_parser.add_argument(
        "--all",
        action="store_true",
        help="Follow next links until the last page",
    )

    return parser


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2))


def attributes_from_args(args: argparse.Namespace) -> AccountAttributes | None:
    """Build account attributes from create command arguments."""
    if args.no_attributes:
        return None
    return AccountAttributes(
        country=args.country,
        base_currency=args.base_currency,
        account_number=args.account_number,
        bank_id=args.bank_id,
        bank_id_code=args.bank_id_code,
        bic=args.bic,
        iban=args.iban,
        name=args.name,
        account_classification=args.account_classification,
        joint_account=args.joint_account,
        status=args.status,
    )


def cmd_init(config_path: Path) -> int:
    """Write a default config file."""
    if config_path.exists():
        print(f"⚠️  {config_path} already exists, not overwriting")
        return 1
    create_default_config(config_path)
    print(f"✓ Wrote {config_path}")
    return 0


def cmd_get(client: AccountsClient, account_id: str) -> int:
    """Fetch one account."""
    account = client.get_account(account_id)
    _print_json(account.to_dict())
    return 0


def cmd_create(client: AccountsClient, args: argparse.Namespace) -> int:
    """Create an account."""
    account = client.create_account(
        organisation_id=args.organisation_id,
        attributes=attributes_from_args(args),
        account_id=args.account_id,
    )
    _print_json(account.to_dict())
    return 0


def cmd_delete(client: AccountsClient, account_id: str, version: int) -> int:
    """Delete an account."""
    client.delete_account(account_id, version)
    print(f"✓ Deleted account {account_id}")
    return 0


def cmd_list(
    client: AccountsClient,
    page_number: int,
    page_size: int | None,
    follow: bool,
) -> int:
    """List one page of accounts, or every page with ``follow``."""
    params = ListAccountsParams(
        page_number=page_number,
        page_size=page_size if page_size is not None else client.page_size,
    )
    pages = client.list_accounts(params)

    accounts: list[Account] = []
    while pages.advance():
        accounts.extend(pages.current_page())
        if not follow:
            break

    _print_json([account.to_dict() for account in accounts])
    return 0


def run_command(config: Config, parsed: argparse.Namespace) -> int:
    """Route a parsed command to its handler."""
    with AccountsClient.from_config(config) as client:
        if parsed.command == "get":
            return cmd_get(client, parsed.account_id)
        elif parsed.command == "create":
            return cmd_create(client, parsed)
        elif parsed.command == "delete":
            return cmd_delete(client, parsed.account_id, parsed.version)
        elif parsed.command == "list":
            return cmd_list(client, parsed.page_number, parsed.page_size, parsed.all)
    return 1


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_cli()
    parsed = parser.parse_args(args)

    setup_logging(parsed.verbose)

    if not parsed.command:
        parser.print_help()
        return 1

    if parsed.command == "init":
        return cmd_init(parsed.config)

    # Load config
    try:
        config = load_config(parsed.config)
    except Form3Error as e:
        print(f"❌ Failed to load config: {e}")
        return 1

    logger.debug(f"Using API at {config.api.base_url}")

    if not parsed.verbose:
        logging.getLogger().setLevel(config.log_level)

    try:
        return run_command(config, parsed)
    except (Form3Error, ValueError) as e:
        print(f"❌ {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
