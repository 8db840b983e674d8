"""
term_store.py — Hierarchical Location Term Store
-------------------------------------------------

Persistence seam between the hierarchy pipeline and the database.

`TermStore` is the interface the synchronizer and the display layer are
written against; `SqlTermStore` implements it on the `location_term` and
`event_location_term` tables.

Guarantees:
- Slugs are unique; creating a duplicate raises `SlugConflictError` so the
  caller can treat it as a late lookup hit
- Write failures surface as `StoreWriteError` and never leave the session in
  a failed state (each write runs inside a SAVEPOINT)
- Event associations are replaced, not appended

Transactions are owned by the caller: the store flushes, the caller commits.

Dependencies:
- SQLAlchemy ORM session

"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from core.exception import SlugConflictError, StoreWriteError
from core.location_types import Node
from db.location_model import EventLocationTerm, LocationTerm


class TermStore(ABC):
    """Operations the location hierarchy needs from a hierarchical term store."""

    @abstractmethod
    def find_by_slug(self, slug: str) -> Optional[Node]:
        ...

    @abstractmethod
    def get_by_id(self, node_id: int) -> Optional[Node]:
        ...

    @abstractmethod
    def create(self, name: str, slug: str, parent_id: int, level: Optional[int] = None) -> int:
        """Returns the new node id; raises SlugConflictError / StoreWriteError."""

    @abstractmethod
    def update_parent(self, node_id: int, parent_id: int) -> None:
        """Raises StoreWriteError when the parent cannot be changed."""

    @abstractmethod
    def children(self, parent_id: int, limit: Optional[int] = None) -> list[Node]:
        ...

    @abstractmethod
    def set_event_terms(self, event_id: int, node_ids: Iterable[int]) -> None:
        """Replaces the event's association with exactly `node_ids`."""

    @abstractmethod
    def get_event_terms(self, event_id: int) -> list[Node]:
        ...


def _to_node(term: LocationTerm) -> Node:
    return Node(
        id=term.term_id,
        name=term.name,
        slug=term.slug,
        parent_id=term.parent_id or 0,
        level=term.level,
    )


class SqlTermStore(TermStore):

    def __init__(self, session: Session):
        self.session = session

    def find_by_slug(self, slug: str) -> Optional[Node]:
        if not slug:
            return None
        term = self.session.query(LocationTerm).filter(LocationTerm.slug == slug).first()
        return _to_node(term) if term else None

    def get_by_id(self, node_id: int) -> Optional[Node]:
        term = self.session.get(LocationTerm, node_id) if node_id else None
        return _to_node(term) if term else None

    def create(self, name: str, slug: str, parent_id: int, level: Optional[int] = None) -> int:
        if not name or not slug:
            raise StoreWriteError("A term name and slug are required")
        if parent_id and self.session.get(LocationTerm, parent_id) is None:
            raise StoreWriteError(f"Parent term {parent_id} does not exist")

        term = LocationTerm(name=name, slug=slug, parent_id=parent_id or 0, level=level)
        try:
            with self.session.begin_nested():
                self.session.add(term)
                self.session.flush()
        except IntegrityError as e:
            raise SlugConflictError(slug) from e
        except SQLAlchemyError as e:
            raise StoreWriteError(f"Failed to create term '{slug}': {e}") from e
        return term.term_id

    def update_parent(self, node_id: int, parent_id: int) -> None:
        term = self.session.get(LocationTerm, node_id)
        if term is None:
            raise StoreWriteError(f"Term {node_id} does not exist")
        if parent_id == node_id:
            raise StoreWriteError(f"Term {node_id} cannot be its own parent")
        if parent_id and self.session.get(LocationTerm, parent_id) is None:
            raise StoreWriteError(f"Parent term {parent_id} does not exist")
        if self._is_descendant(parent_id, node_id):
            raise StoreWriteError(f"Moving term {node_id} under {parent_id} would create a cycle")

        try:
            with self.session.begin_nested():
                term.parent_id = parent_id or 0
                self.session.flush()
        except SQLAlchemyError as e:
            raise StoreWriteError(f"Failed to update parent of term {node_id}: {e}") from e

    def _is_descendant(self, candidate_id: int, ancestor_id: int) -> bool:
        """Walks up from `candidate_id`; True if `ancestor_id` is on the way to the root."""
        visited: set[int] = set()
        current = self.get_by_id(candidate_id)
        while current is not None and current.id not in visited:
            if current.id == ancestor_id:
                return True
            visited.add(current.id)
            current = self.get_by_id(current.parent_id)
        return False

    def children(self, parent_id: int, limit: Optional[int] = None) -> list[Node]:
        query = (
            self.session.query(LocationTerm)
            .filter(LocationTerm.parent_id == parent_id)
            .order_by(LocationTerm.name.asc(), LocationTerm.term_id.asc())
        )
        if limit:
            query = query.limit(limit)
        return [_to_node(term) for term in query.all()]

    def set_event_terms(self, event_id: int, node_ids: Iterable[int]) -> None:
        for link in self.session.query(EventLocationTerm).filter(EventLocationTerm.event_id == event_id).all():
            self.session.delete(link)
        self.session.flush()

        for node_id in dict.fromkeys(node_id for node_id in node_ids if node_id):
            self.session.add(EventLocationTerm(event_id=event_id, term_id=node_id))
        self.session.flush()

    def get_event_terms(self, event_id: int) -> list[Node]:
        terms = (
            self.session.query(LocationTerm)
            .join(EventLocationTerm, EventLocationTerm.term_id == LocationTerm.term_id)
            .filter(EventLocationTerm.event_id == event_id)
            .order_by(LocationTerm.parent_id.asc(), LocationTerm.term_id.asc())
            .all()
        )
        return [_to_node(term) for term in terms]
