"""
Database initialization and seeding.

This script:
- Creates the members and teams tables
- Optionally adds the sample teams and members
- Verifies every named query against the database
- Can reset the database (drop and recreate)

Usage:
    # Create tables
    python -m roster.database.init_db

    # Reset database (drops all tables and recreates)
    python -m roster.database.init_db --reset

    # Add sample data for testing
    python -m roster.database.init_db --sample-data
"""

import argparse
import logging
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from roster.core.logger import setup_logging
from roster.database.session import (
    create_all_tables,
    create_session_factory,
    drop_all_tables,
    engine,
    get_db_context,
)
from roster.models import Member, Team
from roster.query.literal import named_queries
from roster.repositories import MemberRepository, TeamRepository

logger = logging.getLogger(__name__)


def create_tables(engine_instance: Engine, reset: bool = False) -> None:
    """
    Create all database tables.

    Args:
        engine_instance: Engine to create the tables on
        reset: If True, drop existing tables first
    """
    if reset:
        logger.info("Dropping existing tables")
        drop_all_tables(engine_instance)

    create_all_tables(engine_instance)
    logger.info("Tables created")


def verify_named_queries(engine_instance: Engine) -> int:
    """
    Prepare every named query against the database.

    Returns:
        int: Number of verified queries

    Raises:
        QueryDefinitionError: a query references a missing table or column
    """
    with engine_instance.connect() as connection:
        named_queries.verify(connection)
    logger.info("Verified %d named queries", len(named_queries))
    return len(named_queries)


def seed_sample_data(session_factory: sessionmaker) -> None:
    """
    Seed sample data for development and testing.

    Creates teamA and teamB and five members; member1..member4 are split
    between the teams, member5 has no team. Skipped when members exist.
    """
    with get_db_context(session_factory) as db:
        members = MemberRepository(db)
        teams = TeamRepository(db)

        if members.count() > 0:
            logger.info("Members already present, skipping sample data")
            return

        team_a = teams.save(Team("teamA"))
        team_b = teams.save(Team("teamB"))

        members.save_all([
            Member("member1", 10, team_a),
            Member("member2", 19, team_a),
            Member("member3", 20, team_b),
            Member("member4", 21, team_b),
            Member("member5", 40),
        ])
        logger.info("Sample data seeded: %d teams, %d members", teams.count(), members.count())


def log_database_status(session_factory: sessionmaker) -> None:
    """Log current table counts."""
    with get_db_context(session_factory) as db:
        logger.info(
            "Database status: teams=%d members=%d",
            TeamRepository(db).count(),
            MemberRepository(db).count(),
        )


def initialize_database(
    reset: bool = False,
    sample_data: bool = False,
    engine_instance: Optional[Engine] = None,
) -> None:
    """
    Initialize the database.

    Args:
        reset: Drop existing tables before creating
        sample_data: Add sample data for testing
        engine_instance: Engine to use; defaults to the configured one
    """
    engine_instance = engine_instance or engine
    session_factory = create_session_factory(engine_instance)

    create_tables(engine_instance, reset=reset)
    verify_named_queries(engine_instance)

    if sample_data:
        seed_sample_data(session_factory)

    log_database_status(session_factory)


def main(argv=None):
    """Main entry point with CLI argument parsing."""
    parser = argparse.ArgumentParser(
        description="Initialize and seed the roster database",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create tables
  python -m roster.database.init_db

  # Reset database (drop all tables and recreate)
  python -m roster.database.init_db --reset

  # Full reset with sample data, no prompt
  python -m roster.database.init_db --reset --sample-data --yes
        """
    )

    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop existing tables before creating (WARNING: deletes all data!)"
    )

    parser.add_argument(
        "--sample-data",
        action="store_true",
        help="Add sample teams and members"
    )

    parser.add_argument(
        "--yes",
        action="store_true",
        help="Do not ask for confirmation before --reset"
    )

    args = parser.parse_args(argv)
    setup_logging()

    # Confirm reset if requested
    if args.reset and not args.yes:
        response = input("This will DELETE ALL DATA in the database. Type 'yes' to continue: ")
        if response.lower() != 'yes':
            logger.warning("Aborted")
            return 1

    initialize_database(reset=args.reset, sample_data=args.sample_data)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
