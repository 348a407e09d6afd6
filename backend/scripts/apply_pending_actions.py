#!/usr/bin/env python
"""Apply pending corporate actions whose ex-date has been reached.

Actions are applied per security in ex-date order. A failing action is
reported and left pending; the rest of the run continues.

Usage:
    python -m scripts.apply_pending_actions
    python -m scripts.apply_pending_actions --ticker AAPL
    python -m scripts.apply_pending_actions --dry-run
"""

import argparse
import logging
from typing import Optional

from sqlalchemy.orm import Session

from corporate_actions.exceptions import CorporateActionError
from database import get_session_local
from logging_config import setup_logging
from models import CorporateAction, Security
from services.corporate_action_applier import CorporateActionApplier
from services.corporate_action_service import CorporateActionService

logger = logging.getLogger(__name__)


def _pending_symbol_ids(db: Session, ticker: Optional[str]) -> list[str]:
    """Security ids with due pending actions, optionally limited to one ticker."""
    if ticker:
        security = db.query(Security).filter_by(ticker=ticker.upper()).first()
        if not security:
            raise ValueError(f"Unknown ticker: {ticker}")
        return [security.id]
    actions = CorporateActionService.list_pending(db)
    seen: dict[str, None] = {}
    for action in actions:
        seen.setdefault(action.symbol_id, None)
    return list(seen)


def _describe(action: CorporateAction) -> str:
    ticker = action.symbol.ticker if action.symbol else action.symbol_id
    return f"{action.ex_date} {ticker} {action.action_type} ({action.id[:8]})"


def run(db: Session, ticker: Optional[str] = None, dry_run: bool = False) -> dict:
    """Apply (or preview) due pending actions using an existing session.

    Returns a summary dict with ``processed``, ``succeeded``, ``failed``
    and ``adjustments`` counts. Commits after each security unless
    ``dry_run``.
    """
    applier = CorporateActionApplier(db)
    summary = {"processed": 0, "succeeded": 0, "failed": 0, "adjustments": 0}

    symbol_ids = _pending_symbol_ids(db, ticker)
    if not symbol_ids:
        print("No pending corporate actions")
        return summary

    for symbol_id in symbol_ids:
        if dry_run:
            pending = CorporateActionService.list_pending(db, symbol_id=symbol_id)
            if len(pending) > 1:
                print(
                    f"  [DRY RUN] {len(pending)} pending actions on one security: each is "
                    "projected against current lots, not the previous projection"
                )
            for action in pending:
                summary["processed"] += 1
                try:
                    preview = applier.preview(action.id)
                except CorporateActionError as e:
                    summary["failed"] += 1
                    print(f"  [DRY RUN] {_describe(action)}: would fail [{e.code.value}] {e}")
                    continue
                summary["succeeded"] += 1
                summary["adjustments"] += preview.estimated_adjustments
                print(
                    f"  [DRY RUN] {_describe(action)}: {preview.estimated_adjustments} adjustments, "
                    f"{preview.lots_created} new lots"
                )
            continue

        result = applier.batch_apply_pending(symbol_id, applied_by="apply_pending_actions")
        db.commit()
        for outcome in result.per_action_results:
            action = CorporateActionService.get_action(db, outcome.corporate_action_id)
            if outcome.ok:
                print(f"  Applied {_describe(action)}: {outcome.adjustments_created} adjustments")
            else:
                print(f"  FAILED {_describe(action)}: [{outcome.error_code}] {outcome.error_message}")
        summary["processed"] += result.actions_processed
        summary["succeeded"] += result.succeeded
        summary["failed"] += result.failed
        summary["adjustments"] += result.total_adjustments

    if dry_run:
        print("\n[DRY RUN] No changes made. Run without --dry-run to apply.")

    print("\nSummary:")
    print(f"  Actions processed: {summary['processed']}")
    print(f"  Succeeded: {summary['succeeded']}")
    print(f"  Failed: {summary['failed']}")
    print(f"  Adjustments: {summary['adjustments']}")
    return summary


def apply_pending_actions(ticker: Optional[str] = None, dry_run: bool = False) -> dict:
    """Open a session and apply pending actions."""
    SessionLocal = get_session_local()
    db = SessionLocal()
    try:
        return run(db, ticker=ticker, dry_run=dry_run)
    except Exception as e:
        db.rollback()
        print(f"Error: {e}")
        raise
    finally:
        db.close()


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Apply pending corporate actions to the lot ledger"
    )
    parser.add_argument("--ticker", help="Only process actions for this ticker")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Preview adjustments without making changes",
    )
    args = parser.parse_args(argv)

    setup_logging()
    summary = apply_pending_actions(ticker=args.ticker, dry_run=args.dry_run)
    return 1 if summary["failed"] else 0


if __name__ == "__main__":
    raise SystemExit(main())
