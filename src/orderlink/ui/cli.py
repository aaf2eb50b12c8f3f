from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from orderlink.app import issue_pairing_token, pair_subscription, recover_order, suggest_pairing
from orderlink.config import configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _positive_id(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid id: {value}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError(f"Id must be positive: {value}")
    return parsed


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Repair order/subscription linkage")
    subparsers = parser.add_subparsers(dest="command", required=True)

    pair = subparsers.add_parser("pair", help="Pair an orphan subscription with an order")
    pair.add_argument("--subscription-id", type=_positive_id, required=True)
    pair.add_argument("--order-id", type=_positive_id, required=True)
    pair.add_argument("--actor", type=str, required=True, help="Operator performing the pairing")
    pair.add_argument(
        "--token",
        type=str,
        required=True,
        help="Single-use token from 'orderlink token issue'",
    )

    recover = subparsers.add_parser(
        "recover",
        help="Re-run the completion backstop for a paid order",
    )
    recover.add_argument("--order-id", type=_positive_id, required=True)

    orphans = subparsers.add_parser("orphans", help="Orphan subscription commands")
    orphans_sub = orphans.add_subparsers(dest="orphans_command", required=True)
    suggest = orphans_sub.add_parser("suggest", help="Suggest the probable order of an orphan")
    suggest.add_argument("--subscription-id", type=_positive_id, required=True)

    token = subparsers.add_parser("token", help="Pairing token commands")
    token_sub = token.add_subparsers(dest="token_command", required=True)
    issue = token_sub.add_parser("issue", help="Issue a single-use pairing token")
    issue.add_argument("--actor", type=str, required=True)

    return parser.parse_args(list(argv))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "pair":
            response = pair_subscription(
                parsed_args.subscription_id,
                parsed_args.order_id,
                actor=parsed_args.actor,
                token=parsed_args.token,
            )
            if not response.success:
                log.error("Pairing rejected (%s): %s", response.status_code, response.message)
                sys.exit(1)
        elif parsed_args.command == "recover":
            recover_order(parsed_args.order_id)
        elif parsed_args.command == "orphans" and parsed_args.orphans_command == "suggest":
            suggestion = suggest_pairing(parsed_args.subscription_id)
            if suggestion is None:
                log.info("No matching order for subscription %s", parsed_args.subscription_id)
            else:
                log.info(
                    "%s: order_id=%s customer_id=%s (%.0fs apart)",
                    suggestion.label,
                    suggestion.order_id,
                    suggestion.customer_id,
                    suggestion.delta_seconds,
                )
        elif parsed_args.command == "token" and parsed_args.token_command == "issue":
            sys.stdout.write(issue_pairing_token(parsed_args.actor) + "\n")
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    signal(SIGINT, sigint_handler)
    main()
