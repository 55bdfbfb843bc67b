"""
Persistence gateway: every read and write the controllers issue goes through
one `Gateway` per model.
"""

import logging

from flask import abort
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import load_only, selectinload

from data_models import db, Author, Book, BookInstance, Genre

logger = logging.getLogger(__name__)

# SQLite INTEGER is a signed 64-bit value; ids outside it cannot exist.
MIN_ID, MAX_ID = -2**63, 2**63 - 1


class Gateway:
    """
    Query and write helpers for a single model.
    """

    def __init__(self, model, label: str | None = None):
        self.model = model
        self.label = label or model.__name__

    def _populate(self, populate):
        return [selectinload(getattr(self.model, name)) for name in populate]

    def _order(self, key: str):
        if key.startswith("-"):
            return getattr(self.model, key[1:]).desc()
        return getattr(self.model, key).asc()

    def find_by_id(self, ident, populate=()):
        if not MIN_ID <= ident <= MAX_ID:
            return None
        stmt = select(self.model).filter_by(id=ident).options(*self._populate(populate))
        return db.session.scalars(stmt).one_or_none()

    def find_by_ref(self, ref):
        """
        Look up a record from a submitted reference (an id as a string).
        Returns None for malformed or unknown references.
        """
        ref = str(ref or "").strip()
        if not (ref.isascii() and ref.isdigit()):
            return None
        return self.find_by_id(int(ref))

    def get_or_404(self, ident, populate=()):
        obj = self.find_by_id(ident, populate)
        if obj is None:
            abort(404, description=f"{self.label} not found")
        return obj

    def find_many(self, filter=None, fields=None, sort=None, populate=()):
        """
        Fetch records matching an equality filter.

        Args:
            filter (dict): column -> value pairs, all must match.
            fields (iterable): columns to load; others are deferred.
            sort (str or iterable): column names, '-' prefix for descending.
            populate (iterable): relationships to load eagerly.
        """
        stmt = select(self.model)
        if filter:
            stmt = stmt.filter_by(**filter)
        if fields:
            stmt = stmt.options(load_only(*(getattr(self.model, f) for f in fields)))
        if sort:
            keys = (sort,) if isinstance(sort, str) else sort
            stmt = stmt.order_by(*(self._order(k) for k in keys))
        stmt = stmt.options(*self._populate(populate))
        return db.session.scalars(stmt).all()

    def find_one(self, **fields):
        stmt = select(self.model).filter_by(**fields).limit(1)
        return db.session.scalars(stmt).first()

    def count(self, **filter) -> int:
        stmt = select(func.count(self.model.id)).where(
            *(getattr(self.model, k) == v for k, v in filter.items())
        )
        return db.session.scalar(stmt)

    def create(self, obj):
        db.session.add(obj)
        db.session.commit()
        logger.info("Created %s id=%s", self.label, obj.id)
        return obj

    def create_unique(self, obj, *key_fields):
        """
        Insert `obj` unless a record with the same natural key exists.

        The unique constraint on the key settles races between concurrent
        inserts: the loser rolls back and gets the winner's record.

        Returns:
            (record, created)
        """
        key = {name: getattr(obj, name) for name in key_fields}

        with db.session.no_autoflush:
            existing = self.find_one(**key)
        if existing is not None:
            logger.debug("%s already exists (id=%s), not inserting", self.label, existing.id)
            return existing, False

        db.session.add(obj)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            existing = self.find_one(**key)
            if existing is None:
                raise
            logger.debug("%s inserted concurrently (id=%s)", self.label, existing.id)
            return existing, False

        logger.info("Created %s id=%s", self.label, obj.id)
        return obj, True

    def overwrite(self, ident, **values):
        """
        Replace the given fields of an existing record.

        Raises NotFound (404) when `ident` does not exist.
        """
        obj = self.get_or_404(ident)
        for name, value in values.items():
            setattr(obj, name, value)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise
        logger.info("Updated %s id=%s", self.label, obj.id)
        return obj

    def dependents(self, obj) -> list:
        """Records that block deleting `obj`."""
        if obj is None or not self.model.guarded_by:
            return []
        return list(getattr(obj, self.model.guarded_by))

    def delete(self, obj) -> bool:
        dependents = self.dependents(obj)
        if dependents:
            logger.warning(
                "Refusing to delete %s id=%s: %d dependent record(s)",
                self.label, obj.id, len(dependents),
            )
            return False
        ident = obj.id
        db.session.delete(obj)
        db.session.commit()
        logger.info("Deleted %s id=%s", self.label, ident)
        return True


authors = Gateway(Author)
books = Gateway(Book)
book_instances = Gateway(BookInstance, "Book copy")
genres = Gateway(Genre)
