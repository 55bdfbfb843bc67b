from flask import Blueprint

catalog = Blueprint("catalog", __name__, url_prefix="/catalog")


def delete_confirmed(result, field, ident) -> bool:
    """
    True when a validated delete form names the record in the URL.
    """
    return result.ok and result[field] == str(ident)


# Route modules register themselves on the blueprint.
from controllers import author, book, bookinstance, genre  # noqa: E402,F401
