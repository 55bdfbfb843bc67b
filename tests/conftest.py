"""Shared fixtures: an app on an in-memory database plus seeding helpers.

Seed helpers open their own app context and return plain ids, so tests never
hold ORM objects across requests.
"""

from datetime import date

import pytest

from app import create_app
from config import TestConfig
from data_models import db, Author, Book, BookInstance, Genre


@pytest.fixture
def app():
    app = create_app(TestConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def ctx(app):
    """Push an app context for tests that call the gateway directly."""
    with app.app_context():
        yield


def _add(app, obj):
    with app.app_context():
        db.session.add(obj)
        db.session.commit()
        return obj.id


@pytest.fixture
def make_author(app):
    def make(first_name="Jane", family_name="Austen", **kwargs):
        return _add(app, Author(first_name=first_name, family_name=family_name, **kwargs))
    return make


@pytest.fixture
def make_genre(app):
    def make(name="Fiction"):
        return _add(app, Genre(name=name))
    return make


@pytest.fixture
def make_book(app):
    def make(author_id, title="Emma", summary="A novel.", isbn="9780141439587", genre_ids=()):
        with app.app_context():
            book = Book(title=title, author_id=author_id, summary=summary, isbn=isbn)
            book.genres = [db.session.get(Genre, g) for g in genre_ids]
            db.session.add(book)
            db.session.commit()
            return book.id
    return make


@pytest.fixture
def make_book_instance(app):
    def make(book_id, imprint="Penguin, 2003", status="Available", due_back=None):
        return _add(app, BookInstance(
            book_id=book_id,
            imprint=imprint,
            status=status,
            due_back=due_back or date(2030, 1, 1),
        ))
    return make
