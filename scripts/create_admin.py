"""
Provision an account.

    python scripts/create_admin.py            # user row for AUTH_BACKEND=database
    python scripts/create_admin.py --static   # env values for AUTH_BACKEND=static
"""
import argparse
import asyncio
import sys
import os
import getpass
from typing import Optional

# Add project root to path
sys.path.append(os.getcwd())

from cryptonews.database import AsyncSessionLocal
from cryptonews.models.user import User
from cryptonews.core.security import get_password_hash
from sqlalchemy import select

ROLES = ("admin", "author", "reader")

def prompt_password() -> Optional[str]:
    password = getpass.getpass("Enter password: ")
    if not password:
        print("Password cannot be empty.")
        return None

    confirm_password = getpass.getpass("Confirm password: ")
    if password != confirm_password:
        print("Passwords do not match.")
        return None
    return password

def print_static_settings():
    print("Static Admin Credentials")
    print("------------------------")
    email = input("Enter admin email: ").strip().lower()
    if not email:
        print("Email cannot be empty.")
        return

    password = prompt_password()
    if password is None:
        return

    print("\nSet the following environment variables:")
    print("AUTH_BACKEND=static")
    print(f"ADMIN_EMAIL={email}")
    print(f"ADMIN_PASSWORD_HASH={get_password_hash(password)}")

async def create_user():
    print("Create User")
    print("-----------")
    email = input("Enter email: ").strip().lower()
    if not email:
        print("Email cannot be empty.")
        return

    name = input("Enter display name [Admin]: ").strip() or "Admin"
    role = input("Enter role (admin/author/reader) [admin]: ").strip() or "admin"
    if role not in ROLES:
        print(f"Role must be one of: {', '.join(ROLES)}.")
        return

    password = prompt_password()
    if password is None:
        return

    try:
        async with AsyncSessionLocal() as session:
            # Check if exists
            result = await session.execute(select(User).where(User.email == email))
            if result.scalar_one_or_none():
                print(f"Error: User '{email}' already exists.")
                return

            user = User(
                email=email,
                name=name,
                hashed_password=get_password_hash(password),
                role=role,
                is_active=True
            )
            session.add(user)
            await session.commit()
            print(f"Success: {role} '{email}' created.")

    except Exception as e:
        print(f"An error occurred: {e}")

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--static", action="store_true", help="print settings for the static admin backend")
    args = parser.parse_args()

    if args.static:
        print_static_settings()
    else:
        asyncio.run(create_user())
