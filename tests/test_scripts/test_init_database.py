"""
Tests for scripts/init_database.py
"""

from unittest.mock import patch

import numpy as np
import pandas as pd
import pytest
from sqlalchemy import create_engine, inspect

from mediafriend_recommendation_service.models import Recommendation
from scripts.init_database import (
    clean_dataframe_for_db,
    create_tables,
    load_seed_rows,
    main,
    seed_recommendations,
)

SEED_COLUMNS = "from_user_id,to_user_id,domain,external_id,title,media_type,creator,year,genres,status,message\n"


@pytest.fixture
def seed_csv(tmp_path):
    """Seed file with three valid rows and one self-recommendation."""
    path = tmp_path / "seed.csv"
    path.write_text(
        SEED_COLUMNS
        + 'sarah,me,movies_tv,tmdb-1,Heat,movie,Michael Mann,1995,"Crime, Thriller",hit,Classic\n'
        + "sarah,me,movies_tv,tmdb-2,Ronin,movie,,1998,,pending,\n"
        + 'sarah,me,books,ol-3,Dune,book,Frank Herbert,,"Science Fiction",read,\n'
        + "me,me,music,mb-4,Blue,album,Joni Mitchell,1971,Folk,,\n"
    )
    return path


class TestCreateTables:
    """Tests for create_tables function."""

    def test_create_tables(self, tmp_path):
        # Arrange
        engine = create_engine(f"sqlite:///{tmp_path / 'init.db'}")

        # Act
        tables = create_tables(engine)

        # Assert
        assert tables == ["library_items", "recommendations", "view_preferences"]
        assert set(inspect(engine).get_table_names()) == {"library_items", "recommendations", "view_preferences"}
        engine.dispose()

    def test_create_tables_is_idempotent(self, test_db_engine):
        assert create_tables(test_db_engine) == create_tables(test_db_engine)


class TestCleanDataframeForDb:
    """Tests for clean_dataframe_for_db function."""

    def test_nan_becomes_none(self):
        # Arrange
        df = pd.DataFrame({"year": [1999.0, np.nan], "creator": ["Mann", None]})

        # Act
        result = clean_dataframe_for_db(df)

        # Assert
        assert result["year"].tolist() == [1999.0, None]
        assert result["creator"].tolist() == ["Mann", None]


class TestLoadSeedRows:
    """Tests for load_seed_rows function."""

    def test_load_seed_rows(self, seed_csv):
        # Act
        rows = load_seed_rows(seed_csv)

        # Assert
        assert len(rows) == 4
        assert rows[0]["external_id"] == "tmdb-1"
        assert rows[1]["creator"] is None
        assert rows[1]["message"] is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_seed_rows(tmp_path / "missing.csv")

    def test_missing_columns(self, tmp_path):
        # Arrange
        path = tmp_path / "bad.csv"
        path.write_text("from_user_id,title\nsarah,Heat\n")

        # Act & Assert
        with pytest.raises(ValueError) as exc_info:
            load_seed_rows(path)

        assert "to_user_id" in str(exc_info.value)


class TestSeedRecommendations:
    """Tests for seed_recommendations function."""

    def test_seed_sends_and_applies_status(self, seed_csv, lifecycle_service):
        # Arrange
        rows = load_seed_rows(seed_csv)

        # Act
        stats = seed_recommendations(lifecycle_service, rows)

        # Assert
        assert stats == {"sent": 3, "failed": 1}
        movies = {r.title: r for r in lifecycle_service.list_received("me", "movies_tv")}
        assert movies["Heat"].status.value == "hit"
        assert movies["Heat"].genres == ["Crime", "Thriller"]
        assert movies["Heat"].sent_message == "Classic"
        assert movies["Ronin"].status.value == "pending"
        books = lifecycle_service.list_received("me", "books")
        assert books[0].status.value == "consumed"
        assert books[0].consumed_at is not None

    def test_invalid_row_is_counted_as_failed(self, lifecycle_service):
        # Arrange
        rows = [{
            "from_user_id": "sarah",
            "to_user_id": "me",
            "domain": "podcasts",
            "external_id": "p-1",
            "title": "Serial",
        }]

        # Act
        stats = seed_recommendations(lifecycle_service, rows)

        # Assert
        assert stats == {"sent": 0, "failed": 1}


class TestMain:
    """Tests for main function."""

    def test_main_creates_tables_and_seeds(self, seed_csv, test_db_engine, session_factory):
        # Arrange
        with patch("scripts.init_database.engine", test_db_engine), \
                patch("scripts.init_database.SessionLocal", session_factory), \
                patch("sys.argv", ["init_database.py", "--seed-csv", str(seed_csv)]):
            # Act
            main()

        # Assert
        with session_factory() as db:
            assert db.query(Recommendation).count() == 3

    def test_main_without_seed(self, test_db_engine):
        with patch("scripts.init_database.engine", test_db_engine), \
                patch("sys.argv", ["init_database.py"]):
            main()

    def test_main_exits_on_error(self, tmp_path, test_db_engine):
        # Arrange
        with patch("scripts.init_database.engine", test_db_engine), \
                patch("sys.argv", ["init_database.py", "--seed-csv", str(tmp_path / "missing.csv")]):
            # Act & Assert
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 1
