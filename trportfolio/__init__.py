"""Fetch a Trade Republic portfolio timeline and export it to CSV, SQLite and documents."""

__version__ = "0.1.0"