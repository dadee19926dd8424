#!/usr/bin/env python3
"""Setup script for the marketplace core."""

import os
import shutil
import subprocess
import sys
from pathlib import Path


def main():
    """Run setup tasks."""
    print("=" * 80)
    print("Marketplace core - Setup")
    print("=" * 80)

    if sys.version_info < (3, 10):
        print("Error: Python 3.10 or higher is required")
        sys.exit(1)

    print("\n✓ Python version check passed")

    print("\n Creating directories...")
    for dir_path in ("data/db", "data/logs"):
        Path(dir_path).mkdir(parents=True, exist_ok=True)
        print(f"  ✓ Created {dir_path}")

    print("\n📦 Installing dependencies...")
    try:
        subprocess.run(
            [sys.executable, "-m", "pip", "install", "-e", ".[test]"],
            check=True,
        )
        print("  ✓ Dependencies installed")
    except subprocess.CalledProcessError:
        print("  ✗ Failed to install dependencies")
        sys.exit(1)

    if not os.path.exists(".env"):
        print("\n⚠ No .env file found. Creating from .env.example...")
        if os.path.exists(".env.example"):
            shutil.copy(".env.example", ".env")
            print("  ✓ Created .env file - edit it to override config/config.yaml")
        else:
            print("  ✗ .env.example not found")
    else:
        print("\n✓ .env file exists")

    print("\n🗄 Initializing database...")
    try:
        # Imported here so the dependencies above are installed first
        from marketplace.storage.database import Database
        from marketplace.utils.config import get_config

        Database(get_config().database.url)
        print("  ✓ Database initialized")
    except Exception as e:
        print(f"  ✗ Failed to initialize database: {e}")
        sys.exit(1)

    print("\n" + "=" * 80)
    print("✅ Setup completed successfully!")
    print("=" * 80)
    print("\nNext steps:")
    print("1. Adjust config/config.yaml or .env for your database and log settings")
    print("2. Run 'python -m marketplace score' to calculate product scores")
    print("3. Run 'python -m marketplace scheduler' to start the periodic jobs")


if __name__ == "__main__":
    main()
