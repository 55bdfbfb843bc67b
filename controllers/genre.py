from flask import redirect, render_template, request, url_for
from sqlalchemy.exc import IntegrityError

from controllers import catalog, delete_confirmed
from data_models import Genre
from persistence import genres
from validation import Field, FieldError, form_data, validate


GENRE_FIELDS = [
    Field("name").trim()
    .length(min=3, max=100, message="Genre name must contain 3 to 100 characters.")
    .escape(),
]

DELETE_FIELDS = [
    Field("genreid", "Genre id is required.").trim().length(min=1),
]


@catalog.route("/genres")
def genre_list():
    all_genres = genres.find_many(sort="name")
    return render_template("genre_list.html", title="Genre List", genre_list=all_genres)


@catalog.route("/genre/<int:genre_id>")
def genre_detail(genre_id):
    """
    Genre detail page with the books in the genre.
    """
    genre = genres.get_or_404(genre_id, populate=("books",))
    return render_template(
        "genre_detail.html", title="Genre Detail", genre=genre, genre_books=genre.books
    )


@catalog.route("/genre/create", methods=["GET", "POST"])
def genre_create():
    """
    Create a genre, reusing an existing genre with the same name.
    """
    if request.method == "GET":
        return render_template("genre_form.html", title="Create Genre", genre=None, errors=[])

    result = validate(form_data(request.form), GENRE_FIELDS)
    genre = Genre(name=result["name"])

    if not result.ok:
        return render_template(
            "genre_form.html", title="Create Genre", genre=genre, errors=result.errors
        )

    genre, _ = genres.create_unique(genre, "name")
    return redirect(genre.url)


@catalog.route("/genre/<int:genre_id>/update", methods=["GET", "POST"])
def genre_update(genre_id):
    if request.method == "GET":
        genre = genres.get_or_404(genre_id)
        return render_template("genre_form.html", title="Update Genre", genre=genre, errors=[])

    result = validate(form_data(request.form), GENRE_FIELDS)
    genre = Genre(id=genre_id, name=result["name"])

    if result.ok:
        try:
            genre = genres.overwrite(genre_id, name=genre.name)
            return redirect(genre.url)
        except IntegrityError:
            result.errors.append(
                FieldError("name", "A genre with this name already exists.", genre.name)
            )

    return render_template(
        "genre_form.html", title="Update Genre", genre=genre, errors=result.errors
    )


@catalog.route("/genre/<int:genre_id>/delete", methods=["GET", "POST"])
def genre_delete(genre_id):
    """
    Confirm and delete a genre; refused while books are in it.
    """
    genre = genres.find_by_id(genre_id)
    if genre is None:
        return redirect(url_for("catalog.genre_list"))

    genre_books = genres.dependents(genre)

    if request.method == "POST" and not genre_books:
        result = validate(form_data(request.form), DELETE_FIELDS)
        if delete_confirmed(result, "genreid", genre_id) and genres.delete(genre):
            return redirect(url_for("catalog.genre_list"))

    return render_template(
        "genre_delete.html", title="Delete Genre", genre=genre, genre_books=genre_books
    )
