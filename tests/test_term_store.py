"""Tests for the SQL-backed location term store."""

import pytest
from sqlalchemy.orm import sessionmaker

from core.exception import SlugConflictError, StoreWriteError
from db.db import build_engine, init_db
from db.location_model import LocationTerm
from db.term_store import SqlTermStore


class TestCreateAndFind:
    """Test basic term persistence."""

    def test_create_and_lookup(self, store):
        europe_id = store.create("Europe", "europe", 0, 1)
        germany_id = store.create("Germany", "de", europe_id, 2)

        germany = store.find_by_slug("de")
        assert germany.id == germany_id
        assert germany.parent_id == europe_id
        assert germany.level == 2
        assert store.get_by_id(europe_id).is_root

    def test_missing(self, store):
        assert store.find_by_slug("atlantis") is None
        assert store.find_by_slug("") is None
        assert store.get_by_id(999) is None
        assert store.get_by_id(0) is None

    def test_duplicate_slug_conflicts(self, session, store):
        """Test that slug uniqueness is enforced and the session stays usable."""
        store.create("Europe", "europe", 0, 1)
        with pytest.raises(SlugConflictError) as exc_info:
            store.create("Europa", "europe", 0, 1)
        assert exc_info.value.slug == "europe"

        asia_id = store.create("Asia", "asia", 0, 1)
        session.commit()
        assert store.get_by_id(asia_id).name == "Asia"
        assert session.query(LocationTerm).count() == 2

    def test_slug_conflict_is_write_error(self):
        assert issubclass(SlugConflictError, StoreWriteError)

    def test_unknown_parent(self, store):
        with pytest.raises(StoreWriteError):
            store.create("Bavaria", "bavaria", 42, 3)

    def test_empty_name_or_slug(self, store):
        with pytest.raises(StoreWriteError):
            store.create("", "x", 0)
        with pytest.raises(StoreWriteError):
            store.create("X", "", 0)


class TestUpdateParent:
    """Test parent repair."""

    def test_moves_term(self, store):
        germany_id = store.create("Germany", "de", 0, 2)
        bavaria_id = store.create("Bavaria", "bavaria", 0, 3)
        store.update_parent(bavaria_id, germany_id)
        assert store.get_by_id(bavaria_id).parent_id == germany_id

    def test_to_root(self, store):
        germany_id = store.create("Germany", "de", 0, 2)
        bavaria_id = store.create("Bavaria", "bavaria", germany_id, 3)
        store.update_parent(bavaria_id, 0)
        assert store.get_by_id(bavaria_id).is_root

    def test_rejects_invalid(self, store):
        bavaria_id = store.create("Bavaria", "bavaria", 0, 3)
        with pytest.raises(StoreWriteError):
            store.update_parent(bavaria_id, bavaria_id)
        with pytest.raises(StoreWriteError):
            store.update_parent(bavaria_id, 999)
        with pytest.raises(StoreWriteError):
            store.update_parent(999, 0)

    def test_rejects_descendant_parent(self, store):
        """Test that a term cannot be moved under its own subtree."""
        germany_id = store.create("Germany", "de", 0, 2)
        bavaria_id = store.create("Bavaria", "bavaria", germany_id, 3)
        munich_id = store.create("Munich", "munich", bavaria_id, 4)

        with pytest.raises(StoreWriteError, match="cycle"):
            store.update_parent(germany_id, munich_id)
        assert store.get_by_id(germany_id).is_root


class TestChildren:

    def test_children_limited(self, store):
        germany_id = store.create("Germany", "de", 0, 2)
        for name in ("Saxony", "Bavaria", "Hesse"):
            store.create(name, name.lower(), germany_id, 3)
        assert [node.name for node in store.children(germany_id)] == ["Bavaria", "Hesse", "Saxony"]
        assert len(store.children(germany_id, limit=2)) == 2
        assert store.children(12345) == []


class TestEventTerms:
    """Test event association."""

    def test_replaces_association(self, store):
        europe_id = store.create("Europe", "europe", 0, 1)
        germany_id = store.create("Germany", "de", europe_id, 2)
        bavaria_id = store.create("Bavaria", "bavaria", germany_id, 3)

        store.set_event_terms(7, [europe_id, germany_id, bavaria_id])
        store.set_event_terms(7, [germany_id, bavaria_id])

        assert [node.id for node in store.get_event_terms(7)] == [germany_id, bavaria_id]

    def test_ordered_by_parent(self, store):
        europe_id = store.create("Europe", "europe", 0, 1)
        germany_id = store.create("Germany", "de", europe_id, 2)
        bavaria_id = store.create("Bavaria", "bavaria", germany_id, 3)

        store.set_event_terms(7, [bavaria_id, europe_id, germany_id, germany_id])
        assert [node.id for node in store.get_event_terms(7)] == [europe_id, germany_id, bavaria_id]

    def test_events_are_isolated(self, store):
        europe_id = store.create("Europe", "europe", 0, 1)
        store.set_event_terms(1, [europe_id])
        assert store.get_event_terms(2) == []
        store.set_event_terms(1, [])
        assert store.get_event_terms(1) == []


class TestTransactions:
    """Test that writes stay inside the caller's transaction on a file database."""

    @pytest.fixture(name="file_engine")
    def file_engine_fixture(self, tmp_path):
        engine = build_engine(f"sqlite:///{tmp_path / 'terms.db'}")
        init_db(bind=engine)
        yield engine
        engine.dispose()

    def test_rollback_discards_created_terms(self, file_engine):
        Session = sessionmaker(bind=file_engine)
        with Session() as session:
            store = SqlTermStore(session)
            store.create("Bavaria", "bavaria", 0, 3)
            with pytest.raises(SlugConflictError):
                store.create("Bavaria", "bavaria", 0, 3)
            session.rollback()

        with Session() as session:
            assert SqlTermStore(session).find_by_slug("bavaria") is None

    def test_commit_persists_terms(self, file_engine):
        Session = sessionmaker(bind=file_engine)
        with Session() as session:
            SqlTermStore(session).create("Bavaria", "bavaria", 0, 3)
            session.commit()

        with Session() as session:
            assert SqlTermStore(session).find_by_slug("bavaria").level == 3
