#!/usr/bin/env python3
"""Import extra kanji from CSV into the database.

Usage: python import_kanji.py path/to/kanji.csv [--no-seed]
"""
import sys, os, argparse
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
from llm_kanji_srs import db

def main() -> None:
    parser = argparse.ArgumentParser(description="Import kanji CSV")
    parser.add_argument("csv")
    parser.add_argument("--no-seed", action="store_true", help="Do not seed the N5 deck into an empty database")
    args = parser.parse_args()

    if not os.path.exists(args.csv):
        print(f"❌ CSV not found: {args.csv}"); sys.exit(1)

    db.init_db(seed=not args.no_seed)
    db.import_kanji_csv(args.csv)
    progress = db.get_kanji_progress()
    print(f"\n📊 Kanji: {progress['total']} total, {progress['learned']} learned, {progress['new']} new, {progress['review_due']} due")

if __name__ == "__main__":
    main()
