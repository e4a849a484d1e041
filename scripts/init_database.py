#!/usr/bin/env python3
"""
Database Initialization Script

Run this script to create the terminalrecords table in DB_URL.
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent))

from config.database import get_engine, init_database
from config.settings import Settings
from scraper.errors import ConfigError


def main():
    """Create the records table."""
    print("🚀 Initializing Security Times Database...")
    print("=" * 50)

    try:
        settings = Settings.from_env()
        if not settings.db_url:
            raise ConfigError("DB_URL is not set")

        init_database(get_engine(settings.db_url))
        print("✅ Database initialized successfully!")

        print("\n📊 Database Structure:")
        print("   - terminalrecords: terminal, wait_len, timestamp")
        print(f"\n🛫 Terminals: {', '.join(settings.terminals)}")

    except Exception as e:
        print(f"❌ Error initializing database: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
