from __future__ import annotations

import pytest
import sqlalchemy as sa

from eventscribe.cli import build_query_server_parser, query_server_main
from eventscribe.db import seed_sample_data
from eventscribe.db.seed import SAMPLE_EVENTS
from eventscribe.db.tables import events, sessions, speakers, sponsors


def test_seed_is_repeatable(seeded_engine: sa.Engine) -> None:
    main_event = seed_sample_data(seeded_engine)

    with seeded_engine.connect() as conn:
        titles = conn.execute(sa.select(events.c.title).order_by(events.c.id)).scalars().all()
        assert titles == [row["title"] for row in SAMPLE_EVENTS]
        for table in (speakers, sessions, sponsors):
            event_ids = conn.execute(sa.select(table.c.event_id)).scalars().all()
            assert event_ids
            assert set(event_ids) == {main_event}


def test_query_server_parser_defaults() -> None:
    args = build_query_server_parser().parse_args([])
    assert args.seed is False
    assert args.transport == "http"
    assert args.port == 8001


def test_query_server_requires_database_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("EVENTSCRIBE_DATABASE_URL", raising=False)
    assert query_server_main(["--seed"]) == 2
