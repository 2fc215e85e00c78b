"""
Sync Worker

Runs the sync services once and exits, for deployments that drive syncs
from an external cron instead of the in-process scheduler.

Usage:
    python -m unify.workers.sync_worker [--vertical V] [--object O] [--user-id U]
"""
import argparse
import logging
import os
import sys
import uuid

from unify.scheduler import run_all_syncs, run_sync_job
from unify.unification.registry import sync_registry
from unify.verticals import bootstrap

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(levelname)s - %(name)s - %(message)s',
)
logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run unified API sync jobs once.")
    parser.add_argument("--vertical", help="Only sync this vertical (e.g. ats)")
    parser.add_argument("--object", dest="object_name", help="Only sync this object (requires --vertical)")
    parser.add_argument("--user-id", type=uuid.UUID, help="Only sync data of this platform user")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    bootstrap()
    if args.object_name and not args.vertical:
        logger.error("--object requires --vertical")
        return 2

    if not args.vertical:
        results = run_all_syncs(user_id=args.user_id)
    else:
        targets = [
            (v, o) for v, o, _ in sync_registry.all()
            if v == args.vertical and (not args.object_name or o == args.object_name)
        ]
        if not targets:
            logger.error("No sync service registered for %s.%s", args.vertical, args.object_name or "*")
            return 2
        results = {f"{v}.{o}": run_sync_job(v, o, args.user_id) for v, o in targets}

    failed = sum(stats["failed"] for stats in results.values())
    for key, stats in results.items():
        logger.info("%s: %s", key, stats)
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
