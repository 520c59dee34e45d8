# main.py
"""
Command-line entry point: migrate the database and print the lot board.

Usage:
    python main.py [--today YYYY-MM-DD] [--window-days N] [--actor NAME]
"""
import argparse
import logging
import sys
from datetime import date, timedelta

from core.exceptions import DomainError
from infra.db.base import SessionLocal, resolve_db_url
from infra.logging_config import setup_logging
from infra.migrate import run_migrations
from infra.operational_support import bind_trace_id
from infra.services import ServiceGraph, build_service_graph

logger = logging.getLogger(__name__)


def build_services(actor: str | None = None) -> ServiceGraph:
    run_migrations(resolve_db_url())
    session = SessionLocal()
    return build_service_graph(session, actor=actor)


def _print_board(graph: ServiceGraph, today: date, window_days: int) -> None:
    lots = graph.lot_schedule_service
    all_lots = lots.list_lots()
    if not all_lots:
        print("No lots scheduled.")
    for lot in all_lots:
        summary = lots.lot_summary(lot.id, today)
        variance = summary.variance_working_days
        print(
            f"{summary.lot_name:<24} {summary.status.value:<12} {summary.progress_percent:>3}%  "
            f"{summary.current_milestone.label:<26} target={summary.target_completion} "
            f"predicted={summary.predicted_completion} variance={variance if variance is not None else '-'} "
            f"delayed={summary.delayed_task_count}"
        )

    window_end = today + timedelta(days=window_days)
    conflicts = lots.list_capacity_conflicts(today, window_end)
    if conflicts:
        print(f"\nCapacity conflicts {today} .. {window_end}:")
    for conflict in conflicts:
        lot_names = ", ".join(sorted({job.lot_name for job in conflict.jobs}))
        print(
            f"  {conflict.conflict_date} {conflict.subcontractor_name}: "
            f"{conflict.booked}/{conflict.capacity} lots ({lot_names})"
        )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Show lot progress and subcontractor capacity conflicts.")
    parser.add_argument("--today", type=date.fromisoformat, default=None, help="Reference date (YYYY-MM-DD).")
    parser.add_argument("--window-days", type=int, default=14, help="Conflict scan window in calendar days.")
    parser.add_argument("--actor", default=None, help="Name recorded on audit entries.")
    args = parser.parse_args(argv)

    setup_logging()
    with bind_trace_id():
        try:
            graph = build_services(actor=args.actor)
        except Exception:
            logger.exception("Startup failed.")
            return 1
        try:
            _print_board(graph, args.today or date.today(), max(0, args.window_days))
        except DomainError as exc:
            logger.error("Board failed: %s", exc.as_dict())
            return 1
        finally:
            graph.session.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
