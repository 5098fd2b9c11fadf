"""
lecture_reporting/cli/db_commands.py
Database CLI commands: init, seed, stats
"""
import asyncio
from typing import Dict

from sqlalchemy import func, select

from lecture_reporting.database import AsyncSessionLocal, close_db, init_db, seed_demo_data
from lecture_reporting.orm import Base


class DbCommand:
    """Database CLI command handler."""

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run

    def execute(self, args) -> int:
        """Execute database command."""
        if args.db_action == "init":
            return self._init(args)
        elif args.db_action == "seed":
            return self._seed(args)
        elif args.db_action == "stats":
            return self._stats(args)
        else:
            print("Error: Unknown database action (expected init, seed or stats)")
            return 1

    def _init(self, args) -> int:
        print("=== Database Initialization ===")
        if self.dry_run:
            print("[DRY RUN] Would create tables:")
            for table in Base.metadata.sorted_tables:
                print(f"  - {table.name}")
            return 0

        asyncio.run(self._run_init())
        print("✓ Tables created")
        return 0

    async def _run_init(self) -> None:
        try:
            await init_db()
        finally:
            await close_db()

    def _seed(self, args) -> int:
        print("=== Demo Data Seed ===")
        if self.dry_run:
            print("[DRY RUN] Would seed faculties, programs, one user per role and SE101 modules")
            return 0

        seeded = asyncio.run(self._run_seed(args.password))
        if seeded:
            print("✓ Demo data seeded")
        else:
            print("Catalog already populated - nothing to do")
        return 0

    async def _run_seed(self, password) -> bool:
        try:
            await init_db()
            async with AsyncSessionLocal() as session:
                return await seed_demo_data(session, password=password)
        finally:
            await close_db()

    def _stats(self, args) -> int:
        print("=== Table Row Counts ===")
        counts = asyncio.run(self._collect_stats())
        width = max(len(name) for name in counts) if counts else 0
        for name, count in counts.items():
            print(f"  {name.ljust(width)}  {count}")
        return 0

    async def _collect_stats(self) -> Dict[str, int]:
        counts = {}
        try:
            async with AsyncSessionLocal() as session:
                for table in Base.metadata.sorted_tables:
                    result = await session.execute(select(func.count()).select_from(table))
                    counts[table.name] = result.scalar() or 0
        finally:
            await close_db()
        return counts
