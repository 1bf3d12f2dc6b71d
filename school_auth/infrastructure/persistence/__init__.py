"""Persistence: SQLAlchemy engine, models, repositories, and migrations."""
