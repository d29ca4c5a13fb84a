# scripts/sync_locations.py
"""
Sync study locations from the Ghent Open Data API.
Usage: python scripts/sync_locations.py
"""

import sys
import os
import asyncio
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from app.config import settings
from app.database import session_scope
from app.services.sync_service import sync_locations


async def main():
    print(f"🔄 Syncing locations from {settings.GHENT_API_URL}")
    with session_scope() as db:
        try:
            result = await sync_locations(db, source="Script")
        except Exception as e:
            print(f"❌ Sync failed: {e}")
            sys.exit(1)

    print("\n📊 Sync Summary:")
    print(f"   Total records: {result.total}")
    print(f"   Created: {result.created}")
    print(f"   Updated: {result.updated}")
    print(f"   Skipped: {result.skipped}")
    print("\n🎉 Sync completed successfully!")


if __name__ == "__main__":
    asyncio.run(main())
