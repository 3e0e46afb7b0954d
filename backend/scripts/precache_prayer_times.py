#!/usr/bin/env python
# scripts/precache_prayer_times.py

import argparse
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from salat_engine import create_app
from salat_engine.tasks import precache_prayer_times


def build_arg_parser():
    parser = argparse.ArgumentParser(description="Solve and cache the upcoming days for one location")
    parser.add_argument("--lat", type=float, help="Latitude (defaults to DEFAULT_LATITUDE)")
    parser.add_argument("--lng", type=float, help="Longitude (defaults to DEFAULT_LONGITUDE)")
    parser.add_argument("--tz", help="IANA time zone (defaults to DEFAULT_TIMEZONE)")
    parser.add_argument("--method", help="Calculation method key, e.g. MuslimWorldLeague")
    parser.add_argument("--madhab", help="shafi or hanafi")
    parser.add_argument("--start", help="First day, YYYY-MM-DD (defaults to today)")
    parser.add_argument("--days", type=int, help="Number of days (defaults to PRECACHE_DAYS)")
    return parser


def main():
    args = build_arg_parser().parse_args()
    app = create_app(os.getenv('FLASK_CONFIG') or 'default')
    with app.app_context():
        print("--- Starting the prayer times pre-caching script ---")
        result = precache_prayer_times.run(
            latitude=args.lat if args.lat is not None else app.config['DEFAULT_LATITUDE'],
            longitude=args.lng if args.lng is not None else app.config['DEFAULT_LONGITUDE'],
            timezone=args.tz or app.config['DEFAULT_TIMEZONE'],
            method=args.method or app.config['DEFAULT_CALCULATION_METHOD'],
            madhab=args.madhab or app.config['DEFAULT_MADHAB'],
            start_date=args.start,
            days=args.days,
        )
        print(f"SUCCESS: Cached {result['cached']} days, {result['failed']} could not be solved.")
    return 0


if __name__ == '__main__':
    sys.exit(main())
