from datetime import date

import pytest
from sqlalchemy.exc import StatementError

from data_models import db, Author, Book, BookInstance, Genre, format_date


def test_full_name_requires_both_parts():
    assert Author(first_name="Jane", family_name="Austen").full_name == "Jane Austen"
    assert Author(first_name="Jane").full_name == ""
    assert Author(family_name="Austen").full_name == ""


def test_author_dates_are_formatted_or_empty():
    author = Author(first_name="Jane", family_name="Austen", date_of_birth=date(1775, 12, 16))

    assert author.birth_date == "Dec 16, 1775"
    assert author.birth_date_iso == "1775-12-16"
    assert author.death_date == ""
    assert author.death_date_iso == ""


def test_death_before_birth_is_not_checked():
    author = Author(
        first_name="Jane",
        family_name="Austen",
        date_of_birth=date(1817, 7, 18),
        date_of_death=date(1775, 12, 16),
    )

    assert author.lifespan == "Jul 18, 1817 - Dec 16, 1775"


def test_urls_derive_from_ids():
    assert Author(id=3).url == "/catalog/author/3"
    assert Book(id=4).url == "/catalog/book/4"
    assert BookInstance(id=5).url == "/catalog/bookinstance/5"
    assert Genre(id=6).url == "/catalog/genre/6"


def test_format_date_single_digit_day():
    assert format_date(date(2023, 4, 1)) == "Apr 1, 2023"
    assert format_date(None) == ""


def test_delete_guards_are_declared_per_model():
    assert Author.guarded_by == "books"
    assert Book.guarded_by == "instances"
    assert Genre.guarded_by == "books"
    assert BookInstance.guarded_by is None


def test_book_instance_defaults(ctx, make_author, make_book):
    book_id = make_book(make_author())
    copy = BookInstance(book_id=book_id, imprint="Penguin")
    db.session.add(copy)
    db.session.commit()

    assert copy.status == "Maintenance"
    assert copy.due_back == date.today()
    assert copy.due_back_iso == date.today().isoformat()


def test_unknown_status_is_rejected_by_the_column(ctx, make_author, make_book):
    book_id = make_book(make_author())
    db.session.add(BookInstance(book_id=book_id, imprint="Penguin", status="Lost"))

    with pytest.raises(StatementError):
        db.session.commit()
    db.session.rollback()
