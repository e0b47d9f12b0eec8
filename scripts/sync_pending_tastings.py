"""
Run tasting sync passes from the command line.

Usage:
    python scripts/sync_pending_tastings.py                 # one pass
    python scripts/sync_pending_tastings.py --interval 60   # poll every minute
    python scripts/sync_pending_tastings.py --list          # show queue only
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import argparse
import time

from config import settings, get_supabase_client, get_admin_client
from services.pending_tasting_store import JsonFilePendingTastingStore
from services.tasting_sync_service import TastingSyncService


def print_report(report):
    print(f"Processed: {len(report.entries)}  Remaining: {report.remaining}")
    for entry in report.entries:
        line = f"  {entry.job_id}  {entry.outcome.value:<10}"
        if entry.tasting_id:
            line += f"  tasting={entry.tasting_id}"
        if entry.reason:
            line += f"  ({entry.reason})"
        print(line)

    if report.lost:
        print("\n[WARN] Notes dropped without being saved:")
        for entry in report.lost:
            fields = entry.edit.to_patch().to_update() if entry.edit else {}
            print(f"  {entry.job_id}: {fields}")


def main():
    parser = argparse.ArgumentParser(description="Apply queued tasting notes to processed wines")
    parser.add_argument("--store", default=settings.pending_store_path, help="Pending store JSON file")
    parser.add_argument("--interval", type=float, default=0, help="Seconds between passes (0 = single pass)")
    parser.add_argument("--admin", action="store_true", help="Use the service role key")
    parser.add_argument("--list", action="store_true", help="List pending edits and exit")
    args = parser.parse_args()

    client = get_admin_client() if args.admin else get_supabase_client()
    if client is None:
        print("[ERROR] SUPABASE_SERVICE_KEY is not configured")
        sys.exit(1)

    service = TastingSyncService(JsonFilePendingTastingStore(args.store), client=client)

    if args.list:
        pending = service.pending()
        print(f"{len(pending)} pending edit(s) in {args.store}")
        for edit in pending:
            print(f"  {edit.job_id}  attempts={edit.attempts}  {edit.to_patch().to_update()}")
        return

    while True:
        print("=" * 70)
        print(f"TASTING SYNC PASS  {time.strftime('%Y-%m-%d %H:%M:%S')}")
        print("=" * 70)
        print_report(service.reconcile_all())

        if args.interval <= 0:
            break
        try:
            time.sleep(args.interval)
        except KeyboardInterrupt:
            print("\nStopped")
            break


if __name__ == "__main__":
    main()
