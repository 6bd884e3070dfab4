#!/usr/bin/env python3
"""
Create an administrator, or promote an existing user.

Usage:
    python scripts/create_admin.py <username> [--email EMAIL] [--password PASSWORD]
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv

load_dotenv()

from db_config import SessionLocal
from services.users import create_or_promote_admin


def main():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("username")
    parser.add_argument("--email")
    parser.add_argument("--password")
    args = parser.parse_args()

    db_session = SessionLocal()
    try:
        user = create_or_promote_admin(
            db_session, args.username, email=args.email, password=args.password
        )
    except ValueError as e:
        print(f"ERROR: {e}")
        sys.exit(1)
    finally:
        db_session.close()

    print(f"{user.username} (id={user.id}) now has roles: {', '.join(user.roles)}")


if __name__ == "__main__":
    main()
