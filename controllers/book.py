import logging

from flask import redirect, render_template, request, url_for
from sqlalchemy.exc import IntegrityError

from controllers import catalog, delete_confirmed
from data_models import Book
from persistence import authors, book_instances, books, genres
from validation import Field, FieldError, coerce_list, form_data, validate

logger = logging.getLogger(__name__)


BOOK_FIELDS = [
    Field("title", "Title must not be empty.").trim().length(min=1).escape(),
    Field("author", "Author must not be empty.").trim().length(min=1).escape(),
    Field("summary", "Summary must not be empty.").trim().length(min=1).escape(),
    Field("isbn", "ISBN must not be empty.").trim().length(min=1).escape(),
    # Applied to every selected genre.
    Field("genre", "Genre must not be empty.", each=True).escape(),
]

DELETE_FIELDS = [
    Field("bookid", "Book id is required.").trim().length(min=1),
]


@catalog.route("/")
def index():
    """
    Catalog home page with record counts.
    """
    return render_template(
        "index.html",
        title="Local Library Home",
        book_count=books.count(),
        book_instance_count=book_instances.count(),
        book_instance_available_count=book_instances.count(status="Available"),
        author_count=authors.count(),
        genre_count=genres.count(),
    )


def resolve_references(result):
    """
    Load the author and genres a submitted book refers to.

    Unknown references are added to `result.errors`.

    Returns:
        (Author or None, list of Genre)
    """
    author = None
    if result["author"]:
        author = authors.find_by_ref(result["author"])
        if author is None:
            result.errors.append(FieldError("author", "Author not found.", result["author"]))

    book_genres = []
    for ref in result["genre"]:
        genre = genres.find_by_ref(ref)
        if genre is None:
            result.errors.append(FieldError("genre", "Genre not found.", ref))
        else:
            book_genres.append(genre)

    return author, book_genres


def book_from_form(result, author, book_id=None):
    """
    Build an unsaved Book from sanitized form values (genres not attached).
    """
    return Book(
        id=book_id,
        title=result["title"],
        author_id=author.id if author else None,
        summary=result["summary"],
        isbn=result["isbn"],
    )


def render_book_form(title, book=None, selected_genres=(), errors=()):
    """
    Render the book form with every author and genre to choose from.
    """
    return render_template(
        "book_form.html",
        title=title,
        book=book,
        authors=authors.find_many(sort=("family_name", "first_name")),
        genres=genres.find_many(sort="name"),
        selected_genres={str(g) for g in selected_genres},
        errors=list(errors),
    )


@catalog.route("/books")
def book_list():
    """
    List all books by title, with their authors.
    """
    all_books = books.find_many(fields=("title", "author_id"), sort="title", populate=("author",))
    return render_template("book_list.html", title="Book List", book_list=all_books)


@catalog.route("/book/<int:book_id>")
def book_detail(book_id):
    """
    Book detail page with author, genres and all copies.
    """
    book = books.get_or_404(book_id, populate=("author", "genres"))
    copies = book_instances.find_many({"book_id": book_id}, sort="status")
    return render_template("book_detail.html", title=book.title, book=book, book_instances=copies)


@catalog.route("/book/create", methods=["GET", "POST"])
def book_create():
    """
    Create a book. A book with the same title is reused instead of being
    stored twice.
    """
    if request.method == "GET":
        return render_book_form("Create Book")

    result = validate(coerce_list(form_data(request.form), "genre"), BOOK_FIELDS)
    author, book_genres = resolve_references(result)
    book = book_from_form(result, author)

    if not result.ok:
        logger.debug("Book create rejected: %s", result.errors)
        return render_book_form("Create Book", book, result["genre"], result.errors)

    book.genres = book_genres
    book, _ = books.create_unique(book, "title")
    return redirect(book.url)


@catalog.route("/book/<int:book_id>/update", methods=["GET", "POST"])
def book_update(book_id):
    """
    Update a book; every field, genres included, is replaced.
    """
    if request.method == "GET":
        book = books.get_or_404(book_id, populate=("author", "genres"))
        return render_book_form("Update Book", book, [g.id for g in book.genres])

    result = validate(coerce_list(form_data(request.form), "genre"), BOOK_FIELDS)
    author, book_genres = resolve_references(result)
    book = book_from_form(result, author, book_id)

    if result.ok:
        try:
            book = books.overwrite(
                book_id,
                title=book.title,
                author_id=book.author_id,
                summary=book.summary,
                isbn=book.isbn,
                genres=book_genres,
            )
            return redirect(book.url)
        except IntegrityError:
            result.errors.append(
                FieldError("title", "A book with this title already exists.", book.title)
            )

    logger.debug("Book update rejected: %s", result.errors)
    return render_book_form("Update Book", book, result["genre"], result.errors)


@catalog.route("/book/<int:book_id>/delete", methods=["GET", "POST"])
def book_delete(book_id):
    """
    Confirm and delete a book. Books with copies are never deleted; the
    confirmation page listing the copies is shown again instead.
    """
    book = books.find_by_id(book_id)
    if book is None:
        return redirect(url_for("catalog.book_list"))

    copies = books.dependents(book)

    if request.method == "POST" and not copies:
        result = validate(form_data(request.form), DELETE_FIELDS)
        if delete_confirmed(result, "bookid", book_id) and books.delete(book):
            return redirect(url_for("catalog.book_list"))

    return render_template(
        "book_delete.html",
        title="Delete Book",
        book=book,
        book_instances=copies,
    )
