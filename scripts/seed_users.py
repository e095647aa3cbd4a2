from __future__ import annotations

import argparse
from pathlib import Path

from sqlmodel import Session

from gso_library.core.config import settings
from gso_library.db.init_db import init_db
from gso_library.db.seed import load_seed_file, seed_users
from gso_library.db.session import engine


def main() -> None:
    parser = argparse.ArgumentParser(description='Seed user accounts from a JSON file.')
    parser.add_argument(
        '--path',
        default=settings.SEED_USERS_FILE or str(Path(__file__).resolve().parents[1] / 'seed_users.json'),
        help='Path to seed users JSON file',
    )
    parser.add_argument('--dry-run', action='store_true', help='Validate only, do not write to DB')
    args = parser.parse_args()

    path = Path(args.path).expanduser()
    if args.dry_run:
        print(f"validated {len(load_seed_file(path))} seed users")
        return

    init_db()
    with Session(engine) as session:
        created = seed_users(session, path)
    print(f"seeded users: created={len(created)}")


if __name__ == '__main__':
    main()
