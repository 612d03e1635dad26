"""Opaque-cursor pagination and snapshot navigation for SQLModel record sets."""
