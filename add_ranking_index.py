#!/usr/bin/env python3
"""
Add the ranking indexes to an existing leaderboard database.

Databases created before idx_score and idx_region_score were declared serve
the top-K queries with a full table scan followed by a sort. This script
creates whichever of the two indexes is missing so both queries become
ordered index scans.

Usage:
    python add_ranking_index.py [--database-url URL]
"""

import argparse
import asyncio

from leaderboard.database.database import Database

async def add_ranking_indexes(database_url: str = None) -> bool:
    """Create missing ranking indexes. Returns False if the database could not be updated."""

    db = Database(database_url)
    try:
        await db.initialize()
        created = await db.ensure_ranking_indexes()
    except Exception as e:
        print(f"❌ Error creating ranking indexes: {e}")
        return False
    finally:
        await db.close()

    if created:
        print(f"✅ Created {', '.join(created)}")
    else:
        print("✅ Ranking indexes already exist")
    return True

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.split("\n\n")[0].strip())
    parser.add_argument('--database-url', help="Override DATABASE_URL")
    args = parser.parse_args()

    success = asyncio.run(add_ranking_indexes(args.database_url))
    if success:
        print("\n🎯 Index creation complete! Top-K queries should now be served from the index.")
    else:
        print("\n⚠️  Index creation failed. Manual index creation may be needed.")
