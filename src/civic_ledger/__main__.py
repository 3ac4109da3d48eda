"""Entry point for running Civic Ledger.

This module provides the main entry point for Civic Ledger.
It handles:
- Configuration loading
- Logging setup with secret sanitization
- Serving the metadata HTTP endpoints
- Listing the issue dashboard from the command line
- Sending report, status, confirm and funding transactions
- Health checks
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from civic_ledger._version import __version__

if TYPE_CHECKING:
    from civic_ledger.core.actions import ActionResult
    from civic_ledger.core.client import LedgerClient
    from civic_ledger.core.dashboard import Dashboard

log = structlog.get_logger()

ACTION_COMMANDS = ("report", "status", "confirm", "fund", "withdraw")


def setup_logging(
    debug: bool = False,
    log_format: str = "console",
    file_path: Path | None = None,
    file_enabled: bool = False,
) -> None:
    """Configure structured logging with secret sanitization.

    Args:
        debug: Enable debug logging if True
        log_format: Output format ("json" or "console")
        file_path: Path to log file (if file logging enabled)
        file_enabled: Whether to enable file logging
    """
    from civic_ledger.utils.logging import LogFormat, LogLevel, configure_logging

    level = LogLevel.DEBUG if debug else LogLevel.INFO
    fmt = LogFormat(log_format.lower()) if isinstance(log_format, str) else log_format

    configure_logging(
        level=level,
        log_format=fmt,
        file_path=file_path,
        file_enabled=file_enabled,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed argument namespace
    """
    parser = argparse.ArgumentParser(
        prog="civic-ledger",
        description="Civic Ledger - Civic issue reporting backed by a smart contract and IPFS",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=Path("config/config.yaml"),
        help="Path to configuration file (default: config/config.yaml)",
    )

    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse config and validate without running a command",
    )

    parser.add_argument(
        "--format",
        choices=["json", "console"],
        default="console",
        help="Log output format (default: console)",
    )

    parser.add_argument(
        "--health-check",
        action="store_true",
        help="Run health check and exit",
    )

    parser.add_argument(
        "--chain-id",
        type=int,
        default=None,
        help="Network to use (default: chain.default_chain_id from config)",
    )

    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("serve", help="Serve the metadata HTTP endpoints")

    list_parser = subparsers.add_parser("list", help="Print the issue dashboard")
    list_parser.add_argument("--search", default="", help="Filter by location or description")
    list_parser.add_argument(
        "--status",
        default=None,
        help='Filter by status display name, e.g. "In Progress"',
    )
    list_parser.add_argument(
        "--with-funding",
        action="store_true",
        help="Include funding totals for each issue",
    )
    list_parser.add_argument(
        "--table",
        action="store_true",
        help="Print a human-readable listing instead of JSON",
    )

    report_parser = subparsers.add_parser("report", help="Report a new issue with a photo")
    report_parser.add_argument("--location", required=True)
    report_parser.add_argument("--description", required=True)
    report_parser.add_argument("--image", type=Path, required=True, help="Path to the photo")

    status_parser = subparsers.add_parser("status", help="Change an issue's status (admin)")
    status_parser.add_argument("issue_id", type=int)
    status_parser.add_argument("new_status", help='Status display name, e.g. "Resolved"')

    confirm_parser = subparsers.add_parser("confirm", help="Confirm a resolved issue")
    confirm_parser.add_argument("issue_id", type=int)

    for name, help_text in (
        ("fund", "Contribute tokens to an issue"),
        ("withdraw", "Withdraw tokens from an issue (admin)"),
    ):
        funding_parser = subparsers.add_parser(name, help=help_text)
        funding_parser.add_argument("issue_id", type=int)
        funding_parser.add_argument("amount", type=int)

    return parser.parse_args(argv)


def _open_client(config_path: Path, chain_id: int | None) -> LedgerClient:
    from civic_ledger.config.loader import load_config
    from civic_ledger.core.client import create_client

    return create_client(load_config(config_path), chain_id=chain_id)


def print_table(dashboard: Dashboard) -> None:
    """Print the dashboard as an indented listing."""
    from civic_ledger.utils.formatting import format_address, format_ipfs_hash, format_timestamp

    for issue in dashboard.issues:
        print(f"#{issue.id:<4} {issue.status.display:<13} {issue.location}")
        print(f"      {issue.description}")
        print(
            f"      reported by {format_address(issue.reporter)}"
            f" on {format_timestamp(issue.timestamp)}"
            f", photo {format_ipfs_hash(issue.image_hash)}"
        )
        print(f"      funding {issue.available_funds} available of {issue.total_funding}")
    if dashboard.empty_message:
        print(dashboard.empty_message)

    stats = dashboard.stats
    counts = ", ".join(f"{s.display}: {n}" for s, n in stats.by_status.items() if n)
    print(f"\n{stats.total} issues ({counts or 'none'})")
    print(f"Total funding {stats.total_funding}, available {stats.available_funds}")


async def list_issues(
    config_path: Path,
    chain_id: int | None,
    search: str,
    status: str | None,
    with_funding: bool,
    table: bool = False,
) -> int:
    """Print the dashboard for the selected network."""
    from civic_ledger.models.status import IssueStatus

    status_filter = IssueStatus.from_display(status) if status else None

    client = _open_client(config_path, chain_id)
    try:
        dashboard = await client.dashboard(
            search=search,
            status=status_filter,
            include_funding=with_funding,
        )
    finally:
        await client.aclose()

    if table:
        print_table(dashboard)
    else:
        print(json.dumps(dashboard.to_dict(), indent=2))
    return 0


def describe_result(command: str, issue_id: int | None, result: ActionResult) -> dict[str, Any]:
    """Build the JSON summary printed after a mined action."""
    output: dict[str, Any] = {
        "action": command,
        "issueId": issue_id if issue_id is not None else result.receipt.issue_id,
        "txHash": result.receipt.tx_hash,
        "blockNumber": result.receipt.block_number,
        "metadataCid": result.metadata_cid,
        "warnings": result.all_warnings,
    }
    if result.upload is not None:
        output["imageHash"] = result.upload.image_hash
    if result.funding is not None:
        output["funding"] = {
            "totalFunding": result.funding.total,
            "fundsUsed": result.funding.used,
            "availableFunds": result.funding.available,
        }
    if command == "confirm":
        output["verified"] = result.verified
    return output


async def run_action(config_path: Path, chain_id: int | None, args: argparse.Namespace) -> int:
    """Send one transaction through the action layer and print its outcome.

    Mirror and re-read problems after a mined transaction are printed as
    warnings on stderr; the exit code stays 0.
    """
    import mimetypes

    from civic_ledger.models.status import IssueStatus

    command = args.command
    issue_id = getattr(args, "issue_id", None)
    new_status = IssueStatus.from_display(args.new_status) if command == "status" else None

    client = _open_client(config_path, chain_id)
    try:
        actions = client.actions
        if command == "report":
            content_type = mimetypes.guess_type(args.image.name)[0] or "application/octet-stream"
            result = await actions.report_issue(
                args.location,
                args.description,
                args.image.read_bytes(),
                filename=args.image.name,
                content_type=content_type,
            )
        else:
            issue = await client.reader.get_issue(
                issue_id, include_funding=command in ("fund", "withdraw")
            )
            if command == "status":
                result = await actions.update_status(issue, new_status)
            elif command == "confirm":
                result = await actions.confirm_issue(issue)
            elif command == "fund":
                result = await actions.fund(issue, args.amount)
            else:
                result = await actions.withdraw(issue, args.amount)
    finally:
        await client.aclose()

    for warning in result.all_warnings:
        log.warning("action_warning", action=command, warning=warning)
        print(f"warning: {warning}", file=sys.stderr)

    print(json.dumps(describe_result(command, issue_id, result), indent=2))
    return 0


def serve(config_path: Path, chain_id: int | None) -> int:
    """Serve the HTTP endpoints until interrupted."""
    import uvicorn

    from civic_ledger.config.loader import load_config
    from civic_ledger.core.chain import create_gateway
    from civic_ledger.core.client import create_store
    from civic_ledger.utils.errors import ConfigurationError
    from civic_ledger.utils.health import HealthChecker
    from civic_ledger.web.app import create_app

    config = load_config(config_path)
    store = create_store(config)

    try:
        gateway = create_gateway(config, chain_id)
    except ConfigurationError as e:
        log.warning("health_gateway_unavailable", error=str(e))
        gateway = None

    checker = HealthChecker(config, gateway=gateway, store=store, chain_id=chain_id)
    app = create_app(store, checker)

    log.info("serving", host=config.server.host, port=config.server.port)
    uvicorn.run(app, host=config.server.host, port=config.server.port, log_config=None)
    return 0


async def run_checks(
    config_path: Path,
    chain_id: int | None = None,
    dry_run: bool = False,
    health_check: bool = False,
) -> int | None:
    """Validate configuration and optionally run the health check.

    Args:
        config_path: Path to configuration file
        chain_id: Network to check
        dry_run: If True, only validate config
        health_check: If True, run health check

    Returns:
        Exit code if the run should stop here, otherwise None
    """
    from civic_ledger.config.loader import load_config

    log.info("loading_configuration", path=str(config_path))
    config = load_config(config_path)
    log.info("configuration_loaded")

    from civic_ledger.utils.logging import configure_from_config

    configure_from_config(config.logging)

    if dry_run:
        log.info("dry_run_mode_config_valid")
        return 0

    if health_check:
        from civic_ledger.utils.health import HealthChecker

        checker = HealthChecker(config, chain_id=chain_id)
        result = await checker.run_all_checks()

        if result.healthy:
            log.info("health_check_passed", details=result.details)
            return 0
        else:
            log.error("health_check_failed", checks=result.to_dict()["checks"])
            return 1

    return None


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    from civic_ledger.utils.errors import (
        CivicLedgerError,
        ConfigurationError,
        TransactionRejectedError,
        UnknownStatusError,
    )
    from civic_ledger.utils.logging import bind_context

    args = parse_args(argv)

    setup_logging(
        debug=args.debug,
        log_format=args.format,
    )

    log.info(
        "starting_civic_ledger",
        version=__version__,
        config_path=str(args.config),
        command=args.command,
    )
    bind_context(command=args.command, chain_id=args.chain_id)

    try:
        code = asyncio.run(
            run_checks(args.config, args.chain_id, args.dry_run, args.health_check)
        )
        if code is not None:
            return code

        if args.command == "serve":
            return serve(args.config, args.chain_id)
        if args.command == "list":
            return asyncio.run(
                list_issues(
                    args.config,
                    args.chain_id,
                    args.search,
                    args.status,
                    args.with_funding,
                    args.table,
                )
            )
        if args.command in ACTION_COMMANDS:
            return asyncio.run(run_action(args.config, args.chain_id, args))

        log.error("no_command_given", hint="use one of: serve, list, " + ", ".join(ACTION_COMMANDS))
        return 2

    except FileNotFoundError as e:
        log.error("configuration_file_not_found", path=str(args.config), error=str(e))
        return 1
    except ConfigurationError as e:
        log.error("network_misconfigured", error=str(e))
        return 1
    except UnknownStatusError as e:
        log.error("invalid_status", error=str(e))
        return 2
    except TransactionRejectedError:
        log.info("transaction_rejected_by_user", command=args.command)
        print("Transaction cancelled in the wallet; nothing was sent.", file=sys.stderr)
        return 0
    except CivicLedgerError as e:
        log.error("action_failed", command=args.command, error=str(e))
        print(f"error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        log.error("configuration_invalid", error=str(e))
        return 1
    except KeyboardInterrupt:
        log.info("shutting_down_gracefully")
        return 0
    except Exception as e:
        log.exception("fatal_error", error=str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
