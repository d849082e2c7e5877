"""Database engine and schema helpers."""
