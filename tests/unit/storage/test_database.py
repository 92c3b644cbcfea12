"""
Unit tests for database configuration and connection management.

These tests validate database initialization, session handling,
connection pooling, and proper error management.
"""

import os
import pytest
from unittest.mock import patch, MagicMock

from sqlalchemy.orm import Session

from triage.storage.database import (
    _ensure_sqlite_directory,
    init_db,
    get_db_session,
    engine,
    DB_PATH
)


class TestDatabaseModule:
    """Test suite for database configuration and connection management."""

    @pytest.mark.skipif("DATABASE_URL" in os.environ, reason="DATABASE_URL overrides the default")
    def test_database_config_defaults(self):
        """Test database configuration with default values."""
        assert DB_PATH == "sqlite:///data/triage.db"
        assert "QueuePool" in str(engine.pool.__class__)

    @patch('triage.storage.database._ensure_sqlite_directory')
    @patch('triage.storage.database.Base')
    def test_init_db_success(self, mock_base, mock_ensure_directory):
        """Test successful database initialization."""
        mock_metadata = MagicMock()
        mock_base.metadata = mock_metadata

        init_db()

        mock_ensure_directory.assert_called_once_with(DB_PATH)
        mock_metadata.create_all.assert_called_once_with(bind=engine)

    @patch('triage.storage.database._ensure_sqlite_directory')
    @patch('triage.storage.database.Base')
    def test_init_db_error_handling(self, mock_base, mock_ensure_directory):
        """Test error handling during database initialization."""
        mock_metadata = MagicMock()
        mock_metadata.create_all.side_effect = Exception("DB error")
        mock_base.metadata = mock_metadata

        with pytest.raises(RuntimeError) as excinfo:
            init_db()

        assert "Failed to initialize database: DB error" in str(excinfo.value)

    @patch('triage.storage.database.SessionLocal')
    def test_get_db_session_normal_flow(self, mock_session_local):
        """Test normal flow of database session context manager."""
        mock_session = MagicMock(spec=Session)
        mock_session_local.return_value = mock_session

        with get_db_session() as session:
            assert session is mock_session

        mock_session.commit.assert_called_once()
        mock_session.rollback.assert_not_called()
        mock_session.close.assert_called_once()

    @patch('triage.storage.database.SessionLocal')
    def test_get_db_session_with_exception(self, mock_session_local):
        """Test session handling when an exception occurs."""
        mock_session = MagicMock(spec=Session)
        mock_session_local.return_value = mock_session

        with pytest.raises(ValueError):
            with get_db_session() as session:
                raise ValueError("Test exception")

        mock_session.commit.assert_not_called()
        mock_session.rollback.assert_called_once()
        mock_session.close.assert_called_once()

    def test_sqlite_directory_created(self, tmp_path):
        """SQLite file databases get their parent directory created."""
        db_file = tmp_path / "nested" / "triage.db"

        _ensure_sqlite_directory(f"sqlite:///{db_file}")

        assert db_file.parent.is_dir()

    def test_memory_database_needs_no_directory(self, tmp_path):
        with patch('triage.storage.database.Path') as mock_path:
            _ensure_sqlite_directory("sqlite://")
            _ensure_sqlite_directory("sqlite:///:memory:")
            mock_path.assert_not_called()


if __name__ == "__main__":
    pytest.main()
