"""Database layer: ORM models and async engine helpers."""
