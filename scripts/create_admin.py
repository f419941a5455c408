#!/usr/bin/env python3
"""
Script to create an admin dashboard user
"""
import asyncio
import getpass
import sys
import os

# Add parent directory to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select
from app.db.database import AsyncSessionLocal, init_db
from app.models.admin import AdminUser
from app.core.security import get_password_hash


async def create_admin():
    """Create admin user"""

    username = input("Enter admin username: ").strip()
    if not username:
        print("Username is required")
        return

    password = getpass.getpass("Enter admin password: ").strip()
    if not password or len(password) < 8:
        print("Password must be at least 8 characters")
        return

    await init_db()

    async with AsyncSessionLocal() as db:
        # Check if admin already exists
        result = await db.execute(select(AdminUser).where(AdminUser.username == username))
        if result.scalar_one_or_none():
            print(f"Admin {username} already exists")
            return

        admin = AdminUser(username=username, password_hash=get_password_hash(password))
        db.add(admin)
        await db.commit()
        await db.refresh(admin)

        print("Admin created successfully!")
        print(f"ID: {admin.id}")
        print(f"Username: {admin.username}")


if __name__ == "__main__":
    print("Creating admin user...")
    try:
        asyncio.run(create_admin())
    except KeyboardInterrupt:
        print("\nOperation cancelled")
    except Exception as e:
        print(f"Error creating admin: {e}")
