"""
Database initialization script.

Usage: python -m travelmgr.db.init_db
"""
from travelmgr.core.logging_config import setup_logging
from travelmgr.db.session import init_db

if __name__ == "__main__":
    setup_logging()
    print("Initializing database...")
    init_db()
    print("Database initialized successfully!")
