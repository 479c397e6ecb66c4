# src/maskoff/scripts/tokens.py
"""
Development helper standing in for the identity service.

Usage:
    python -m maskoff.scripts.tokens alice --username alice --display-name "Alice A."

This script:
1. Creates the database tables if they are missing
2. Upserts a profile directory entry for the subject (when --username is given)
3. Prints a bearer token whose subject is the given id
"""

from __future__ import annotations

import argparse
from datetime import timedelta

from sqlalchemy.orm import Session

from maskoff.core.security import create_access_token
from maskoff.db.session import SessionLocal, create_tables
from maskoff.models import UserProfile


def upsert_profile(db: Session, user_id: str, username: str, display_name: str | None) -> UserProfile:
    """Create or update the directory entry for a subject.

    Args:
        db: Database session
        user_id: Subject id
        username: Unique username
        display_name: Optional display name
    """
    profile = db.get(UserProfile, user_id)
    if profile is None:
        profile = UserProfile(user_id=user_id, username=username)
        db.add(profile)
    profile.username = username
    profile.display_name = display_name
    db.commit()
    return profile


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Mint a development bearer token")
    parser.add_argument("subject_id", help="Opaque subject id to embed in the token")
    parser.add_argument("--username", help="Also register the subject in the profile directory")
    parser.add_argument("--display-name", default=None)
    parser.add_argument("--minutes", type=int, default=None, help="Token lifetime override")
    args = parser.parse_args(argv)

    if args.username:
        create_tables()
        db = SessionLocal()
        try:
            upsert_profile(db, args.subject_id, args.username, args.display_name)
        finally:
            db.close()
        print(f"Registered profile {args.username} for {args.subject_id}")

    expires = timedelta(minutes=args.minutes) if args.minutes else None
    print(create_access_token(args.subject_id, expires_delta=expires))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
