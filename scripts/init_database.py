"""
Create the database tables and optionally seed recommendations from a CSV file.

CSV columns: from_user_id, to_user_id, domain, external_id, title, media_type,
creator, year, genres (comma separated), status, message
"""

import sys
from pathlib import Path

# Add parent directory to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

import logging
import argparse
from typing import Dict, List

import pandas as pd

from mediafriend_recommendation_service.config import get_log_level
from mediafriend_recommendation_service.errors import RecommendationServiceError
from mediafriend_recommendation_service.models import Base
from mediafriend_recommendation_service.models.database import SessionLocal, engine
from mediafriend_recommendation_service.services import RecommendationLifecycleService

# Configure logging
logging.basicConfig(
    level=get_log_level(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["from_user_id", "to_user_id", "domain", "external_id", "title"]


def create_tables(engine) -> List[str]:
    """
    Create all tables that do not exist yet.

    Args:
        engine: SQLAlchemy engine

    Returns:
        Names of the tables known to the metadata
    """
    Base.metadata.create_all(bind=engine)
    tables = sorted(Base.metadata.tables.keys())
    logger.info(f"✓ Tables ready: {', '.join(tables)}")
    return tables


def clean_dataframe_for_db(df: pd.DataFrame) -> pd.DataFrame:
    """
    Replace NaN/NA values with None for database compatibility.

    Args:
        df: Input DataFrame

    Returns:
        Cleaned DataFrame
    """
    return df.astype(object).where(pd.notnull(df), None)


def load_seed_rows(csv_path: Path) -> List[Dict]:
    """
    Read seed recommendations from CSV.

    Raises:
        FileNotFoundError: CSV does not exist
        ValueError: required columns are missing
    """
    if not csv_path.exists():
        raise FileNotFoundError(f"Seed file not found: {csv_path}")

    df = pd.read_csv(csv_path, dtype={"external_id": str, "from_user_id": str, "to_user_id": str})
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Seed file is missing columns: {missing}")

    rows = clean_dataframe_for_db(df).to_dict('records')
    logger.info(f"Loaded {len(rows)} seed rows from {csv_path}")
    return rows


def seed_recommendations(service: RecommendationLifecycleService, rows: List[Dict]) -> Dict[str, int]:
    """
    Send each seed row through the lifecycle service, then apply its status.

    Args:
        service: Lifecycle service bound to the target database
        rows: Seed rows

    Returns:
        Dictionary with sent and failed counts
    """
    stats = {"sent": 0, "failed": 0}

    for row in rows:
        item = {
            "external_id": row["external_id"],
            "title": row["title"],
            "media_type": row.get("media_type"),
            "creator": row.get("creator"),
            "year": row.get("year"),
            "genres": row.get("genres"),
        }
        try:
            result = service.send(
                row["from_user_id"],
                [row["to_user_id"]],
                row["domain"],
                item,
                message=row.get("message")
            )
            if not result.sent:
                stats["failed"] += 1
                logger.warning(f"Skipped '{row['title']}': {result.failed}")
                continue

            status = row.get("status")
            if status and status != "pending":
                service.set_status(result.sent[0].id, row["to_user_id"], status)
            stats["sent"] += 1

        except RecommendationServiceError as e:
            stats["failed"] += 1
            logger.warning(f"Skipped '{row.get('title')}': {e.message}")

    logger.info(f"✓ Seeded {stats['sent']} recommendations ({stats['failed']} failed)")
    return stats


def main():
    """Main execution function."""
    parser = argparse.ArgumentParser(
        description='Create database tables and optionally seed recommendations'
    )
    parser.add_argument(
        '--seed-csv',
        type=str,
        default=None,
        help='CSV file with recommendations to seed (relative to project root)'
    )

    args = parser.parse_args()

    logger.info("="*70)
    logger.info("INITIALIZE DATABASE")
    logger.info("="*70)

    try:
        create_tables(engine)

        if args.seed_csv:
            rows = load_seed_rows(project_root / args.seed_csv)
            seed_recommendations(RecommendationLifecycleService(SessionLocal), rows)
        else:
            logger.info("⊘ No seed file given")

        logger.info("✓ DATABASE INITIALIZATION COMPLETE")

    except Exception as e:
        logger.error(f"Error during database initialization: {str(e)}", exc_info=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
