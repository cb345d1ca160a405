#!/usr/bin/env python3
"""
Seed the database with checklists and the initial admin account.

Run this once after deployment, and again whenever checklist forms are
added. Existing checklists and an existing admin are left untouched.

Usage:
    python scripts/seed.py
    python scripts/seed.py --checklists-dir=path/to/checklists

Requirements:
    - INITIAL_ADMIN_PASSWORD should be set in .env (defaults to an insecure value)
"""
import argparse
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlmodel import Session, select

from app.assignments.catalog import sync_checklists
from app.core.config import settings
from app.core.database import create_db_and_tables, engine
from app.core.security import hash_answer, hash_password
from app.models import User

DEFAULT_ADMIN_PASSWORD = "password123"


def seed_admin(session: Session, username: str, password: str) -> bool:
    """Create the initial admin if it does not exist. Returns True if created."""
    if session.exec(select(User).where(User.username == username)).first():
        return False

    session.add(
        User(
            username=username,
            first_name="Admin",
            last_name="User",
            password_hash=hash_password(password),
            security_question_1_id=1,
            security_answer_1_hash=hash_answer(os.getenv("INITIAL_ADMIN_SEC_ANSWER1", "Fluffy")),
            security_question_2_id=3,
            security_answer_2_hash=hash_answer(
                os.getenv("INITIAL_ADMIN_SEC_ANSWER2", "Central Elementary")
            ),
            is_admin=True,
        )
    )
    session.commit()
    return True


def main():
    parser = argparse.ArgumentParser(description="Seed checklists and the initial admin")
    parser.add_argument("--checklists-dir", default=settings.checklists_dir)
    parser.add_argument("--skip-admin", action="store_true")
    args = parser.parse_args()

    create_db_and_tables()

    with Session(engine) as session:
        stats = sync_checklists(session, args.checklists_dir)
        print(
            f"Checklists: {stats['created']} created, {stats['existing']} already present, "
            f"{stats['skipped']} skipped"
        )

        if args.skip_admin:
            return

        if settings.initial_admin_password == DEFAULT_ADMIN_PASSWORD:
            print()
            print(f'WARNING: Initial admin password is the default "{DEFAULT_ADMIN_PASSWORD}".')
            print("Set INITIAL_ADMIN_PASSWORD in .env for production.")
            print()

        if seed_admin(session, settings.initial_admin_username, settings.initial_admin_password):
            print(f'Admin user "{settings.initial_admin_username}" created.')
        else:
            print(f'Admin user "{settings.initial_admin_username}" already exists. Skipping.')


if __name__ == "__main__":
    main()
