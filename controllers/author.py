import logging

from flask import redirect, render_template, request, url_for
from sqlalchemy.exc import IntegrityError

from controllers import catalog, delete_confirmed
from data_models import Author
from persistence import authors, books
from validation import Field, FieldError, form_data, validate

logger = logging.getLogger(__name__)


AUTHOR_FIELDS = [
    Field("first_name").trim()
    .length(min=1, max=100, message="First name must be specified.")
    .escape()
    .alphanumeric("First name has non-alphanumeric characters."),
    Field("family_name").trim()
    .length(min=1, max=100, message="Family name must be specified.")
    .escape()
    .alphanumeric("Family name has non-alphanumeric characters."),
    # Empty dates are allowed; otherwise ISO format, converted to a date.
    Field("date_of_birth", "Invalid date of birth.").optional().iso8601().to_date(),
    Field("date_of_death", "Invalid date of death.").optional().iso8601().to_date(),
]

DELETE_FIELDS = [
    Field("authorid", "Author id is required.").trim().length(min=1),
]


def author_from_form(data, author_id=None):
    """
    Build an unsaved Author from sanitized form values.
    """
    return Author(
        id=author_id,
        first_name=data["first_name"],
        family_name=data["family_name"],
        date_of_birth=data["date_of_birth"],
        date_of_death=data["date_of_death"],
    )


def books_by(author_id):
    return books.find_many({"author_id": author_id}, fields=("title", "summary"), sort="title")


@catalog.route("/authors")
def author_list():
    """
    List all authors, sorted by name.
    """
    all_authors = authors.find_many(sort=("first_name", "family_name"))
    return render_template("author_list.html", title="Author List", author_list=all_authors)


@catalog.route("/author/<int:author_id>")
def author_detail(author_id):
    """
    Author detail page including their books.
    """
    author = authors.get_or_404(author_id)
    return render_template(
        "author_detail.html",
        title="Author Detail",
        author=author,
        author_books=books_by(author_id),
    )


@catalog.route("/author/create", methods=["GET", "POST"])
def author_create():
    """
    Create an author. An author with the same first and family name is
    reused instead of being stored twice.
    """
    if request.method == "GET":
        return render_template("author_form.html", title="Create Author", author=None, errors=[])

    result = validate(form_data(request.form), AUTHOR_FIELDS)
    author = author_from_form(result)

    if not result.ok:
        logger.debug("Author create rejected: %s", result.errors)
        return render_template(
            "author_form.html", title="Create Author", author=author, errors=result.errors
        )

    # An existing author with the same name is reused; redirect to it.
    author, _ = authors.create_unique(author, "first_name", "family_name")
    return redirect(author.url)


@catalog.route("/author/<int:author_id>/update", methods=["GET", "POST"])
def author_update(author_id):
    """
    Update an author; every field is overwritten with the submitted values.
    """
    if request.method == "GET":
        author = authors.get_or_404(author_id)
        return render_template("author_form.html", title="Update Author", author=author, errors=[])

    result = validate(form_data(request.form), AUTHOR_FIELDS)
    author = author_from_form(result, author_id)

    if result.ok:
        try:
            author = authors.overwrite(
                author_id,
                first_name=author.first_name,
                family_name=author.family_name,
                date_of_birth=author.date_of_birth,
                date_of_death=author.date_of_death,
            )
            return redirect(author.url)
        except IntegrityError:
            result.errors.append(
                FieldError("family_name", "An author with this name already exists.", author.family_name)
            )

    logger.debug("Author update rejected: %s", result.errors)
    return render_template(
        "author_form.html", title="Update Author", author=author, errors=result.errors
    )


@catalog.route("/author/<int:author_id>/delete", methods=["GET", "POST"])
def author_delete(author_id):
    """
    Confirm and delete an author. Authors with books are never deleted;
    the confirmation page listing their books is shown again instead.
    """
    author = authors.find_by_id(author_id)
    if author is None:
        return redirect(url_for("catalog.author_list"))

    author_books = authors.dependents(author)

    if request.method == "POST" and not author_books:
        result = validate(form_data(request.form), DELETE_FIELDS)
        if delete_confirmed(result, "authorid", author_id) and authors.delete(author):
            return redirect(url_for("catalog.author_list"))

    return render_template(
        "author_delete.html",
        title="Delete Author",
        author=author,
        author_books=author_books,
    )
