"""Grant the admin role to an existing (or new) Firebase Auth user."""

import argparse
import getpass
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from firebase_admin import firestore  # noqa: E402

from iqra.firebase import get_auth, get_db  # noqa: E402


def ensure_admin(auth_client, db, email: str, password: str = "") -> str:
    """Return the uid of ``email`` after giving it the admin claim and user doc."""

    try:
        user = auth_client.get_user_by_email(email)
        print(f"Admin user already exists: {user.uid}")
    except auth_client.UserNotFoundError:
        if not password:
            raise SystemExit("User does not exist; a password is required to create it")
        user = auth_client.create_user(email=email, password=password, display_name="Admin User")
        print(f"Admin user created in Authentication: {user.uid}")

    auth_client.set_custom_user_claims(user.uid, {"role": "admin"})
    db.collection("users").document(user.uid).set(
        {
            "email": email,
            "role": "admin",
            "isAdmin": True,
            "displayName": user.display_name or "Admin User",
            "permissions": ["all"],
            "status": "active",
            "createdAt": firestore.SERVER_TIMESTAMP,
        },
        merge=True,
    )
    return user.uid


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create or promote an admin user.")
    parser.add_argument("email")
    parser.add_argument("--password", help="password for a new user (prompted if omitted)")
    args = parser.parse_args(argv)

    auth_client = get_auth()
    password = args.password or ""
    try:
        auth_client.get_user_by_email(args.email)
    except auth_client.UserNotFoundError:
        password = password or getpass.getpass("Password for new admin: ")
    uid = ensure_admin(auth_client, get_db(), args.email, password)
    print(f"Admin role granted to {args.email} ({uid})")
    return 0


if __name__ == "__main__":  # pragma: no cover - script entrypoint
    sys.exit(main())
