"""
Run the scheduled jobs once, outside the API process.
Run: python scripts/run_jobs.py [alerts|snapshot]   (both when omitted)
"""
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from staywatch.services.alerts import run_daily_alerts
from staywatch.services.snapshots import run_snapshot_job

if __name__ == "__main__":
    which = sys.argv[1] if len(sys.argv) > 1 else "all"
    if which not in ("alerts", "snapshot", "all"):
        print("Usage: python scripts/run_jobs.py [alerts|snapshot]")
        sys.exit(1)
    if which in ("alerts", "all"):
        sent = run_daily_alerts()
        print(f"Alerts delivered: {sent}")
    if which in ("snapshot", "all"):
        run_snapshot_job()
        print("Snapshot recorded.")
