"""
User administration for the credential store.

There is no registration endpoint; users are created here:
    python scripts/manage_users.py add alice s3cret --nickname Alice
    python scripts/manage_users.py rehash
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from botsuite.core.config import settings
from botsuite.services.credential_store import CredentialStore

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage bot suite users")
    parser.add_argument(
        "--users-file",
        default=settings.USERS_FILE,
        help=f"Credential store path (default: {settings.USERS_FILE})",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    add = commands.add_parser("add", help="Create or replace a user")
    add.add_argument("uid")
    add.add_argument("password")
    add.add_argument("--nickname", default=None)

    commands.add_parser("rehash", help="Convert plaintext passwords to bcrypt hashes")
    commands.add_parser("list", help="List user ids and nicknames")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    store = CredentialStore(args.users_file)

    if args.command == "add":
        store.upsert_user(args.uid, args.password, args.nickname)
        logger.info(f"Saved user '{args.uid}' to {args.users_file}")
    elif args.command == "rehash":
        converted = store.rehash_plaintext()
        logger.info(f"Converted {converted} password(s) in {args.users_file}")
    elif args.command == "list":
        for user in store.load()["users"]:
            print(f"{user.get('uid')}\t{user.get('nickname') or '-'}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
