"""Shared fixtures for polaris tests."""

import logging

import pytest

from polaris.types import DAY_MS, HOUR_MS, MemoryRecord

# 2026-03-15T12:00:00Z
NOW = 1773576000000


def build_record(
    id="r1",
    type="Journal entry",
    title="Untitled",
    content="",
    created_at=NOW - HOUR_MS,
    **kwargs,
) -> MemoryRecord:
    """Construct a MemoryRecord with sensible defaults for tests."""
    return MemoryRecord(
        id=id, type=type, title=title, content=content, created_at=created_at, **kwargs
    )


@pytest.fixture
def make_record():
    """Factory fixture: ``make_record(id=..., title=..., ...)``."""
    return build_record


@pytest.fixture
def sample_records():
    """A small heterogeneous snapshot, newest first."""
    return [
        build_record(
            id="j1",
            type="Journal entry",
            title="Morning pages",
            content="Thinking about the project roadmap and the launch.",
            created_at=NOW - 2 * HOUR_MS,
            tags=["writing", "reflection"],
            sentiment="positive",
        ),
        build_record(
            id="a1",
            type="Agenda task",
            title="Draft project plan",
            content="Outline milestones for the project.",
            created_at=NOW - 1 * DAY_MS - HOUR_MS,
            tags=["work"],
            status="pending",
            priority="high",
            related_ids=["d1"],
        ),
        build_record(
            id="d1",
            type="Deliverable",
            title="Launch website",
            content="Ship the marketing site.\n\nGuardrails: no dark patterns\nSuccess: 1k visitors",
            created_at=NOW - 10 * DAY_MS,
            tags=["work", "launch"],
            status="in-progress",
            priority="medium",
        ),
        build_record(
            id="p1",
            type="Person",
            title="Ada Lovelace",
            content="Mentor\nMet at the conference",
            created_at=NOW - 40 * DAY_MS,
            related_ids=["c1"],
        ),
        build_record(
            id="c1",
            type="Concept",
            title="Compounding",
            content="Small gains add up.",
            created_at=NOW - 400 * DAY_MS,
            tags=["ideas"],
        ),
    ]


@pytest.fixture(autouse=True)
def clean_polaris_logger():
    """Remove handlers from the polaris logger before/after each test."""
    logger = logging.getLogger("polaris")
    logger.handlers.clear()
    logger.setLevel(logging.WARNING)
    yield
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.WARNING)
