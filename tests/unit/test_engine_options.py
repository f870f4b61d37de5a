"""Unit tests for engine configuration"""

from open_planner.infrastructure.database.session import engine_options


def test_server_database_uses_pool_settings():
    options = engine_options("postgresql+psycopg2://u:p@localhost:5432/open_planner")
    assert options["pool_pre_ping"] is True
    assert options["pool_size"] == 10
    assert options["pool_recycle"] == 3600


def test_sqlite_skips_pool_settings():
    options = engine_options("sqlite:///./dev.db")
    assert options == {"connect_args": {"check_same_thread": False}}
