#!/usr/bin/env python
# scripts/cleanup_prayer_cache.py

import os
import sys

# This script is intended to be run from the command line (e.g. a daily cron job).
# We add the backend directory to the Python path to allow imports.
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from salat_engine import create_app
from salat_engine.services.prayer_time_service import get_engine


def cleanup_prayer_cache(retention_days=None):
    """
    Deletes cached prayer times older than the retention window.

    Entries are never purged on lookup, so this is the only place the cache
    shrinks besides Redis key expiry. Running it twice in a row is harmless.
    """
    app = create_app(os.getenv('FLASK_CONFIG') or 'default')
    with app.app_context():
        if retention_days is None:
            retention_days = app.config['PRAYER_CACHE_RETENTION_DAYS']
        print(f"--- Starting prayer cache cleanup (retention: {retention_days} days) ---")
        removed = get_engine().cleanup_cache(retention_days)
        if removed > 0:
            print(f"SUCCESS: Deleted {removed} expired prayer cache entries.")
        else:
            print("INFO: No expired prayer cache entries found.")
        print("--- Cleanup script finished. ---")
        return removed


if __name__ == '__main__':
    days = int(sys.argv[1]) if len(sys.argv) > 1 else None
    cleanup_prayer_cache(days)
