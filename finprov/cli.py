"""Command line entry point of the finality provider daemon tool."""

from __future__ import annotations

import argparse
import os
import sys
from typing import Optional, Sequence

from .client_context import FLAG_HOME, ClientContext, persist_client_ctx
from .config import (
    DEFAULT_FPD_DIR,
    DEFAULT_RPC_PORT,
    cfg_file,
    default_config_with_home,
    log_dir,
    write_config,
)

FORCE_FLAG = "force"
FP_EOTS_PK_FLAG = "eots-pk"
RPC_LISTENER_FLAG = "rpc-listener"
FPD_DAEMON_ADDRESS_FLAG = "daemon-address"
KEY_NAME_FLAG = "key-name"
APP_HASH_FLAG = "app-hash"
CHAIN_ID_FLAG = "chain-id"
CHECK_DOUBLE_SIGN_FLAG = "check-double-sign"
FROM_FILE_FLAG = "from-file"
UP_TO_HEIGHT_FLAG = "up-to-height"

MONIKER_FLAG = "moniker"
IDENTITY_FLAG = "identity"
WEBSITE_FLAG = "website"
SECURITY_CONTACT_FLAG = "security-contact"
DETAILS_FLAG = "details"

COMMISSION_RATE_FLAG = "commission-rate"
COMMISSION_MAX_RATE_FLAG = "commission-max-rate"
COMMISSION_MAX_CHANGE_RATE_FLAG = "commission-max-change-rate"

DEFAULT_FPD_DAEMON_ADDRESS = f"127.0.0.1:{DEFAULT_RPC_PORT}"


def _clean_and_expand(path: str) -> str:
    return os.path.abspath(os.path.expandvars(os.path.expanduser(path)))


def init_home(home_path: str, force: bool = False) -> str:
    """Create a home directory holding the log directory and a default configuration.

    Raises FileExistsError if the directory exists and ``force`` is false.
    Returns the cleaned home path.
    """
    home = _clean_and_expand(home_path)
    if os.path.exists(home) and not force:
        raise FileExistsError(f"home path {home} already exists")

    os.makedirs(home, mode=0o700, exist_ok=True)
    os.makedirs(log_dir(home), mode=0o700, exist_ok=True)

    write_config(default_config_with_home(home), cfg_file(home))
    return home


def _home_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        f"--{FLAG_HOME}",
        dest="home",
        default=argparse.SUPPRESS,
        help=f"The application home directory (default {DEFAULT_FPD_DIR})",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fpd",
        description="fpd is the daemon to create and manage finality providers.",
    )
    _home_option(parser)
    commands = parser.add_subparsers(dest="command")

    init = commands.add_parser(
        "init",
        help="Initialize a finality-provider home directory.",
        description="Creates a new finality-provider home directory with default config",
        epilog="example: fpd init --home /home/user/.fpd --force",
    )
    _home_option(init)
    init.add_argument(
        f"--{FORCE_FLAG}",
        action="store_true",
        help="Override existing configuration",
    )
    return parser


def _run_init(ctx: ClientContext, args: argparse.Namespace) -> None:
    init_home(ctx.home_dir, args.force)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line tool and return its exit status."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    changed = {FLAG_HOME} if hasattr(args, "home") else set()
    home = getattr(args, "home", DEFAULT_FPD_DIR)

    try:
        ctx = persist_client_ctx(ClientContext(), home, changed)
        if args.command == "init":
            _run_init(ctx, args)
    except (ValueError, OSError) as exc:
        print(
            f"Whoops. There was an error while executing your fpd CLI '{exc}'",
            file=sys.stderr,
        )
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())