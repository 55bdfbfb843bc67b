import logging
from datetime import date

from flask import redirect, render_template, request, url_for

from controllers import catalog, delete_confirmed
from data_models import BOOK_STATUSES, BookInstance
from persistence import book_instances, books
from validation import Field, FieldError, form_data, validate

logger = logging.getLogger(__name__)


BOOK_INSTANCE_FIELDS = [
    Field("book", "Book must be specified.").trim().length(min=1).escape(),
    Field("imprint", "Imprint must be specified.").trim().length(min=1).escape(),
    # Allowed values are enforced by the status column.
    Field("status").escape(),
    Field("due_back", "Invalid date.").optional().iso8601().to_date(),
]

DELETE_FIELDS = [
    Field("bookinstanceid", "Book instance id is required.").trim().length(min=1),
]


def book_instance_from_form(result, book, instance_id=None):
    """
    Build an unsaved BookInstance. Missing status and due date fall back to
    'Maintenance' and today.
    """
    return BookInstance(
        id=instance_id,
        book_id=book.id if book else None,
        imprint=result["imprint"],
        status=result["status"] or "Maintenance",
        due_back=result["due_back"] or date.today(),
    )


def resolve_book(result):
    book = None
    if result["book"]:
        book = books.find_by_ref(result["book"])
        if book is None:
            result.errors.append(FieldError("book", "Book not found.", result["book"]))
    return book


def render_book_instance_form(title, book_instance=None, errors=()):
    """
    Render the copy form with all book titles to choose from.
    """
    return render_template(
        "bookinstance_form.html",
        title=title,
        book_list=books.find_many(fields=("title",), sort="title"),
        statuses=BOOK_STATUSES,
        bookinstance=book_instance,
        selected_book=book_instance.book_id if book_instance else None,
        errors=list(errors),
    )


@catalog.route("/bookinstances")
def bookinstance_list():
    """
    List all copies with the book each one belongs to.
    """
    all_copies = book_instances.find_many(populate=("book",))
    return render_template(
        "bookinstance_list.html", title="Book Instance List", bookinstance_list=all_copies
    )


@catalog.route("/bookinstance/<int:instance_id>")
def bookinstance_detail(instance_id):
    book_instance = book_instances.get_or_404(instance_id, populate=("book",))
    return render_template("bookinstance_detail.html", title="Book:", bookinstance=book_instance)


@catalog.route("/bookinstance/create", methods=["GET", "POST"])
def bookinstance_create():
    """
    Create a copy. Copies are never deduplicated.
    """
    if request.method == "GET":
        return render_book_instance_form("Create BookInstance")

    result = validate(form_data(request.form), BOOK_INSTANCE_FIELDS)
    book = resolve_book(result)
    book_instance = book_instance_from_form(result, book)

    if not result.ok:
        logger.debug("Book instance create rejected: %s", result.errors)
        return render_book_instance_form("Create BookInstance", book_instance, result.errors)

    book_instances.create(book_instance)
    return redirect(book_instance.url)


@catalog.route("/bookinstance/<int:instance_id>/update", methods=["GET", "POST"])
def bookinstance_update(instance_id):
    """
    Update a copy; every field is overwritten with the submitted values.
    """
    if request.method == "GET":
        book_instance = book_instances.get_or_404(instance_id, populate=("book",))
        return render_book_instance_form("Update BookInstance", book_instance)

    result = validate(form_data(request.form), BOOK_INSTANCE_FIELDS)
    book = resolve_book(result)
    book_instance = book_instance_from_form(result, book, instance_id)

    if not result.ok:
        logger.debug("Book instance update rejected: %s", result.errors)
        return render_book_instance_form("Update BookInstance", book_instance, result.errors)

    book_instance = book_instances.overwrite(
        instance_id,
        book_id=book_instance.book_id,
        imprint=book_instance.imprint,
        status=book_instance.status,
        due_back=book_instance.due_back,
    )
    return redirect(book_instance.url)


@catalog.route("/bookinstance/<int:instance_id>/delete", methods=["GET", "POST"])
def bookinstance_delete(instance_id):
    """
    Confirm and delete a copy. Copies have no dependents, so a valid delete
    form always succeeds; a form that does not name this copy deletes nothing.
    """
    book_instance = book_instances.find_by_id(instance_id, populate=("book",))
    if book_instance is None:
        return redirect(url_for("catalog.bookinstance_list"))

    if request.method == "POST":
        result = validate(form_data(request.form), DELETE_FIELDS)
        if delete_confirmed(result, "bookinstanceid", instance_id):
            book_instances.delete(book_instance)
        else:
            logger.warning("Book instance delete rejected: %s", result.errors)
        return redirect(url_for("catalog.bookinstance_list"))

    return render_template("bookinstance_delete.html", title="Delete Copy", bookinstance=book_instance)
