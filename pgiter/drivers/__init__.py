"""Executors for pgiter."""
