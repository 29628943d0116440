"""account_cli entrypoint for operator-driven identity actions."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from typing import TextIO

from podcast_identity.config.settings import load_settings
from podcast_identity.domain.auth.roles import Role
from podcast_identity.infrastructure.logging import configure_logging
from podcast_identity.infrastructure.runtime import IdentityRuntime, build_identity_runtime

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser for account actions."""

    parser = argparse.ArgumentParser(prog="account-cli")
    commands = parser.add_subparsers(dest="command", required=True)

    create = commands.add_parser("create-account", help="register a new account")
    create.add_argument("--email", required=True)
    create.add_argument("--password", required=True)
    create.add_argument(
        "--role",
        choices=[role.value for role in Role],
        default=Role.CLIENT.value,
    )

    login = commands.add_parser("login", help="verify credentials and print a token")
    login.add_argument("--email", required=True)
    login.add_argument("--password", required=True)

    whoami = commands.add_parser("whoami", help="resolve a bearer token to its account")
    whoami.add_argument("--token", required=True)

    return parser


async def run_command(
    args: argparse.Namespace,
    *,
    runtime: IdentityRuntime,
    out: TextIO,
) -> int:
    """Run one parsed command against the runtime and return an exit code."""

    service = runtime.identity_service
    if args.command == "create-account":
        created = await service.create_account(
            email=args.email,
            password=args.password,
            role=Role(args.role),
        )
        if not created.ok:
            print(created.message, file=sys.stderr)
            return 1
        print(created.user_id, file=out)
        return 0

    if args.command == "login":
        logged_in = await service.login(email=args.email, password=args.password)
        if not logged_in.ok:
            print(logged_in.message, file=sys.stderr)
            return 1
        print(logged_in.token, file=out)
        return 0

    resolved = await service.authenticate_token(token=args.token)
    if resolved.user is None:
        print(resolved.message, file=sys.stderr)
        return 1
    print(f"{resolved.user.user_id} {resolved.user.email} {resolved.user.role}", file=out)
    return 0


async def _run_cli(args: argparse.Namespace) -> int:
    settings = load_settings()
    configure_logging(level=settings.log_level)
    logger.info("account_cli_starting command=%s", args.command)

    runtime = build_identity_runtime(settings)
    try:
        return await run_command(args, runtime=runtime, out=sys.stdout)
    finally:
        await runtime.aclose()


def main(argv: Sequence[str] | None = None) -> int:
    """Parse arguments and run one account action."""

    args = build_parser().parse_args(argv)
    return asyncio.run(_run_cli(args))


if __name__ == "__main__":
    sys.exit(main())
