"""Event management database schema and sample data."""

from __future__ import annotations

from .seed import seed_sample_data
from .tables import events, metadata, sessions, speakers, sponsors

__all__ = [
    "events",
    "metadata",
    "seed_sample_data",
    "sessions",
    "speakers",
    "sponsors",
]
