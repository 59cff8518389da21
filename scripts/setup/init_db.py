"""
Initialize the console state database — creates the app_state table.
Run once before first launch, or after adding new models.
Usage: python scripts/setup/init_db.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from access_console.database import create_tables, engine
from access_console.config import settings
from sqlalchemy import inspect, text


def main():
    print("🗄️  Access Console DB Initialization")
    print("=" * 40)
    print(f"📡 Database: {settings.DATABASE_URL}")

    # Test connection
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("✅ Database connection OK")
    except Exception as e:
        print(f"❌ Cannot connect to database: {e}")
        print("\nCheck DATABASE_URL in .env (default: sqlite:///./access_console.db)")
        sys.exit(1)

    print("\n📋 Creating tables...")
    create_tables()
    print("✅ All tables created")

    tables = sorted(inspect(engine).get_table_names())
    print(f"\n📊 Tables in database ({len(tables)} total):")
    for t in tables:
        print(f"   ✓ {t}")

    print("\n🎉 Database ready! You can now start the console:")
    print(f"   uvicorn access_console.main:app --host {settings.CONSOLE_HOST} --port {settings.CONSOLE_PORT} --reload")


if __name__ == "__main__":
    main()
