from __future__ import annotations

import argparse
from pathlib import Path

from sqlmodel import Session

from app.db.init_db import init_db
from app.db.session import engine
from app.services.reference_seed import (
    DEFAULT_PRESETS_PATH,
    SYSTEM_ADMIN_EMAIL,
    ensure_admin_user,
    load_presets,
    seed_categories,
)


def main() -> None:
    parser = argparse.ArgumentParser(description='Seed report categories and the administrator account.')
    parser.add_argument('--path', default=str(DEFAULT_PRESETS_PATH), help='Path to category presets JSON file')
    parser.add_argument('--admin-email', default=SYSTEM_ADMIN_EMAIL, help='Administrator account email')
    parser.add_argument('--admin-password', default=None, help='Password for a newly created administrator')
    parser.add_argument('--dry-run', action='store_true', help='Validate only, do not write to DB')
    args = parser.parse_args()

    presets = load_presets(Path(args.path).expanduser())
    if args.dry_run:
        print(f"validated {len(presets)} preset categories")
        return

    init_db()
    with Session(engine) as session:
        summary = seed_categories(session, presets)
        admin, generated = ensure_admin_user(session, args.admin_email, args.admin_password)
    print(
        f"seeded categories: created={summary.created} updated={summary.updated} skipped={summary.skipped}"
    )
    if generated:
        print(f"created admin {admin.email} with password {generated}")


if __name__ == '__main__':
    main()
