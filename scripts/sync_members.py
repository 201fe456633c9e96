"""
Manual script to sync members of Congress from every upstream source.

Run this to populate or refresh the members collection.

Usage:
    python scripts/sync_members.py S000622                  # One member
    python scripts/sync_members.py S000622 L000577          # Several members
    python scripts/sync_members.py --all                    # Everyone in congress-legislators
    python scripts/sync_members.py --chamber senate --congress 117
    python scripts/sync_members.py S000622 --dry-run        # Don't touch MongoDB
"""
import argparse
import asyncio
import json
import logging
import sys

from member_sync.config.constants import CURRENT_CONGRESS
from member_sync.config.settings import settings
from member_sync.database import InMemoryMemberRepository, MemberRepository, close_async_client
from member_sync.ingestion import HttpTransport
from member_sync.models import Chamber
from member_sync.sync import create_service


async def sync_members(args) -> dict:
    """Run the requested sync and return the service statistics."""
    repository = InMemoryMemberRepository() if args.dry_run else MemberRepository()
    
    async with HttpTransport() as transport:
        service = create_service(transport, repository, with_pictures=not args.no_pictures)
        
        if args.all:
            members = await service.sync_all_members()
        elif args.chamber:
            members = await service.sync_congress_members(Chamber(args.chamber), args.congress)
        else:
            members = await service.sync_members(args.member_ids)
    
    if not args.dry_run:
        await close_async_client()
    
    print("\n✅ Sync Complete!")
    print("=" * 60)
    print(f"📊 Statistics:")
    print(f"   • Processed: {service.stats['processed']}")
    print(f"   • Inserted:  {service.stats['inserted']} new members")
    print(f"   • Updated:   {service.stats['updated']} existing members")
    print(f"   • Errors:    {service.stats['errors']}")
    
    if args.show:
        for member in members:
            if member.projection is not None:
                print(json.dumps(member.projection.model_dump(mode="json"), indent=2))
    
    return service.stats


def main():
    """CLI entry point"""
    parser = argparse.ArgumentParser(
        description="Sync members of Congress from BioGuide, ProPublica and congress-legislators",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Sync one member and print the merged record
  python scripts/sync_members.py S000622 --show
  
  # Sync every member of the 117th Senate
  python scripts/sync_members.py --chamber senate --congress 117
        """
    )
    parser.add_argument("member_ids", nargs="*", help="Bioguide ids to sync")
    parser.add_argument("--all", action="store_true", help="Sync every known member")
    parser.add_argument("--chamber", choices=["senate", "house"], help="Sync a chamber roster")
    parser.add_argument(
        "--congress",
        type=int,
        default=CURRENT_CONGRESS,
        help=f"Congress number for --chamber (default: {CURRENT_CONGRESS})"
    )
    parser.add_argument("--dry-run", action="store_true", help="Keep results in memory only")
    parser.add_argument("--no-pictures", action="store_true", help="Skip profile pictures")
    parser.add_argument("--show", action="store_true", help="Print the merged records")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    
    args = parser.parse_args()
    if not (args.member_ids or args.all or args.chamber):
        parser.error("give member ids, --all or --chamber")
    
    # Configure logging
    log_level = logging.DEBUG if args.verbose else settings.LOG_LEVEL
    logging.basicConfig(level=log_level, format=settings.LOG_FORMAT)
    
    try:
        stats = asyncio.run(sync_members(args))
        
        # Exit with error code if there were errors
        sys.exit(1 if stats["errors"] > 0 else 0)
        
    except KeyboardInterrupt:
        print("\n\n⚠️  Sync interrupted by user")
        sys.exit(1)
    except Exception as e:
        print(f"\n\n❌ Fatal error: {e}")
        logging.exception("Fatal error during sync")
        sys.exit(1)


if __name__ == "__main__":
    main()
