#!/usr/bin/env python3
"""
Create the tables and seed the default achievement catalog and learning paths.

Run: python scripts/seed_achievements.py
     python scripts/seed_achievements.py --reset        # drop and recreate every table first
     python scripts/seed_achievements.py --list         # print the catalog, touch nothing

Uses DATABASE_URL from the environment or .env.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

_project_root = Path(__file__).resolve().parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed the default achievement catalog and learning paths.")
    parser.add_argument("--reset", action="store_true", help="Drop and recreate all tables before seeding")
    parser.add_argument("--list", action="store_true", help="Print the default catalog and exit")
    args = parser.parse_args()

    from learnhub.services.achievement_catalog import DEFAULT_ACHIEVEMENTS
    from learnhub.services.learning_path_catalog import DEFAULT_LEARNING_PATHS

    if args.list:
        for rule in DEFAULT_ACHIEVEMENTS:
            print(f"{rule.key:<20} {rule.metric.value:<20} target={rule.target:<6} xp={rule.points:<5} {rule.title}")
        for path in DEFAULT_LEARNING_PATHS:
            modules = ", ".join(m.module_id for m in path.modules)
            print(f"{path.key:<28} {path.difficulty:<13} {path.estimated_time:>4} min  {modules}")
        return 0

    from learnhub.config import SessionLocal, create_db, reset_db
    from learnhub.services.achievement_evaluator import seed_achievements
    from learnhub.services.learning_paths import seed_learning_paths

    if args.reset:
        reset_db()
    else:
        create_db()

    db = SessionLocal()
    try:
        created = seed_achievements(db)
        paths = seed_learning_paths(db)
        db.commit()
    except Exception as e:
        db.rollback()
        print(f"Seeding failed: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()

    print(f"Seeded {created} achievement(s); catalog has {len(DEFAULT_ACHIEVEMENTS)} rule(s).")
    print(f"Seeded {paths} learning path(s); {len(DEFAULT_LEARNING_PATHS)} defined.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
