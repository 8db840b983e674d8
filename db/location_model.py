"""
location_model.py — Location Hierarchy Tables (ORM Models)
-----------------------------------------------------------

This module defines the SQLAlchemy ORM models backing the location
hierarchy term store.

Tables:
- `location_term`: one row per hierarchy term, linked to its parent term
- `event_location_term`: association of events with their location terms

Purpose:
- Stores continent > country > state > city > street > street-number terms
  as a parent-linked tree (parent_id = 0 marks a root term)
- Enforces slug uniqueness so concurrent saves converge on a single term
- Lets events be filtered and displayed at any level of the hierarchy

Dependencies:
- SQLAlchemy ORM

"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.sql import func
from db.db import Base


class LocationTerm(Base):
    """
    Table: location_term

    Fields:
    - name: Display name (e.g. "Bavaria")
    - slug: URL-safe identifier, unique across the taxonomy (e.g. "bavaria", "de")
    - parent_id: term_id of the parent term, 0 for root terms
    - level: Hierarchy level at creation time (1-6, informational)
    """
    __tablename__ = "location_term"

    term_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    slug = Column(String, unique=True, nullable=False, index=True)
    parent_id = Column(Integer, nullable=False, default=0, index=True)
    level = Column(Integer)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class EventLocationTerm(Base):
    """
    Table: event_location_term

    Links an event (owned by the host calendar) to each term of its location chain.
    """
    __tablename__ = "event_location_term"

    event_id = Column(Integer, primary_key=True)
    term_id = Column(Integer, ForeignKey("location_term.term_id", ondelete="CASCADE"), primary_key=True)
