"""Create a user account.

Usage:
  python scripts/create_user.py --email alice@example.com --password '...'

NOTE: This is intended for local/dev and first-time setup.
"""

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from cleaning_checklist.auth.crud import create_user, get_user_by_id
from cleaning_checklist.auth.security import hash_password
from cleaning_checklist.config import load_config
from cleaning_checklist.db import connect, init_db


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--email", required=True)
    ap.add_argument("--password", required=True)
    args = ap.parse_args()

    cfg = load_config()
    init_db(cfg.DB_DSN)

    with connect(cfg.DB_DSN) as conn:
        user_id = create_user(conn, email=args.email, password_hash=hash_password(args.password))
        u = get_user_by_id(conn, user_id)

    print("Created user:")
    print(u)


if __name__ == "__main__":
    main()
