"""
Verify your .env configuration works.

Run this before doing the full sync to catch configuration issues early.

Usage:
    python scripts/check_connection.py
    python scripts/check_connection.py --create-indexes
"""
import argparse
import asyncio
import logging
import sys

from member_sync.config.settings import settings
from member_sync.database import close_sync_client, create_member_indexes, get_members_collection_sync, ping
from member_sync.errors import UpstreamUnavailable
from member_sync.ingestion import HttpTransport
from member_sync.ingestion.bioguide import bioguide_member_url
from pymongo.errors import PyMongoError


def check_mongodb(create_indexes: bool = False) -> bool:
    """Ping MongoDB and report the members collection"""
    print("🔍 Testing MongoDB connection...")
    print(f"   URI: {settings.MONGODB_URI}")
    print(f"   Database: {settings.MONGODB_DATABASE}")
    
    try:
        ping()
        print("   ✅ MongoDB connection successful!")
        count = get_members_collection_sync().count_documents({})
        print(f"   👥 {settings.MEMBERS_COLLECTION} collection has {count} documents")
        if create_indexes:
            for name in create_member_indexes():
                print(f"   📇 {name}")
        return True
    except PyMongoError as e:
        print(f"   ❌ MongoDB connection failed: {e}")
        return False
    finally:
        close_sync_client()


async def check_bioguide() -> bool:
    """Fetch one bioguide record"""
    print("\n🔍 Testing bioguide.congress.gov...")
    
    async with HttpTransport() as transport:
        try:
            await transport.fetch(bioguide_member_url("S000622"))
            print("   ✅ bioguide reachable")
            return True
        except UpstreamUnavailable as e:
            print(f"   ❌ {e}")
            return False


def main():
    parser = argparse.ArgumentParser(description="Check MongoDB and upstream connectivity")
    parser.add_argument("--create-indexes", action="store_true", help="Create the members indexes")
    args = parser.parse_args()
    
    logging.basicConfig(level=settings.LOG_LEVEL, format=settings.LOG_FORMAT)
    
    ok = check_mongodb(args.create_indexes)
    ok = asyncio.run(check_bioguide()) and ok
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
