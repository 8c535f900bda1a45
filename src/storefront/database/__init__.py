"""Database engine, session management and ORM models."""
