import os
import sys

import django

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')
django.setup()

from api.db import get_db


def promote_admin(email):
    """Give an existing (signed-in at least once) user the admin role."""
    users = get_db().users
    email = email.strip().lower()

    result = users.update_one(
        {"email": email},
        {"$set": {"role": "admin", "status": "active"}}
    )
    if result.matched_count == 0:
        print(f"FAILED: no user with email {email}. Sign in once from the client first.")
        return False

    print(f"SUCCESS: {email} is now an admin")
    return True


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("Usage: python create_production_admin.py <email>")
        sys.exit(1)
    sys.exit(0 if promote_admin(sys.argv[1]) else 1)
