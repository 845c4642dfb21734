"""Sample data for local development and end-to-end tests.

`seed_sample_data` creates the tables when missing, clears them and inserts
three events with speakers, sessions and sponsors attached to the first one.
"""

from __future__ import annotations

from datetime import date, datetime

from fastmcp.utilities.logging import get_logger
import sqlalchemy as sa

from eventscribe.db.tables import events, metadata, sessions, speakers, sponsors

_logger = get_logger(__name__)

SAMPLE_EVENTS: list[dict[str, object]] = [
    {
        "title": "TechCon 2024",
        "event_type": "Conference",
        "event_date": date(2024, 9, 15),
        "location": "San Francisco Convention Center",
        "description": (
            "Annual technology conference featuring the latest innovations in AI, "
            "cloud computing, and software development."
        ),
    },
    {
        "title": "AI Workshop Series",
        "event_type": "Workshop",
        "event_date": date(2024, 8, 20),
        "location": "Silicon Valley Community Center",
        "description": (
            "Hands-on workshop series covering machine learning fundamentals and "
            "practical AI applications."
        ),
    },
    {
        "title": "Startup Pitch Night",
        "event_type": "Networking",
        "event_date": date(2024, 7, 30),
        "location": "Downtown Startup Hub",
        "description": (
            "Monthly networking event where early-stage startups pitch their ideas "
            "to investors and mentors."
        ),
    },
]

SAMPLE_SPEAKERS: list[dict[str, object]] = [
    {
        "name": "Dr. Sarah Chen",
        "topic": "Machine Learning in Healthcare",
        "bio": "Leading AI researcher with 15+ years experience in healthcare applications.",
        "company": "MedTech AI Labs",
    },
    {
        "name": "Marcus Rodriguez",
        "topic": "Cloud Architecture Best Practices",
        "bio": "Senior Cloud Architect specializing in scalable distributed systems.",
        "company": "CloudScale Solutions",
    },
]

SAMPLE_SESSIONS: list[dict[str, object]] = [
    {
        "title": "Introduction to Neural Networks",
        "description": "Comprehensive overview of neural network architectures and applications.",
        "start_time": datetime(2024, 9, 15, 9, 0),
        "end_time": datetime(2024, 9, 15, 10, 30),
        "room": "Main Auditorium",
    },
    {
        "title": "Building Scalable APIs",
        "description": "Best practices for designing and implementing scalable REST APIs.",
        "start_time": datetime(2024, 9, 15, 11, 0),
        "end_time": datetime(2024, 9, 15, 12, 30),
        "room": "Conference Room A",
    },
]

SAMPLE_SPONSORS: list[dict[str, object]] = [
    {"name": "TechCorp Solutions", "tier": "platinum", "website": "https://techcorp.example.com"},
    {"name": "InnovateLabs", "tier": "gold", "website": "https://innovatelabs.example.com"},
]


def seed_sample_data(engine: sa.Engine) -> int:
    """Create tables if needed and load the sample data set.

    Returns:
        Id of the event the speakers, sessions and sponsors belong to
    """
    metadata.create_all(engine)
    with engine.begin() as conn:
        for table in (sessions, speakers, sponsors, events):
            conn.execute(table.delete())

        event_ids = [
            conn.execute(events.insert().values(**row)).inserted_primary_key[0]
            for row in SAMPLE_EVENTS
        ]
        main_event = event_ids[0]
        speaker_ids = [
            conn.execute(
                speakers.insert().values(**row, event_id=main_event)
            ).inserted_primary_key[0]
            for row in SAMPLE_SPEAKERS
        ]
        for row, speaker_id in zip(SAMPLE_SESSIONS, speaker_ids, strict=True):
            conn.execute(sessions.insert().values(**row, event_id=main_event, speaker_id=speaker_id))
        for row in SAMPLE_SPONSORS:
            conn.execute(sponsors.insert().values(**row, event_id=main_event))

    _logger.info("Seeded %d events (main event id=%s)", len(event_ids), main_event)
    return main_event
