"""
LocalLibrary - a library catalog built with Flask and SQLAlchemy.

Features:
- Authors, genres, books and book copies with create / update / delete forms
- Form sanitization and validation with all errors shown on the form
- Duplicate authors, genres and books are detected by name or title
- Authors, genres and books cannot be deleted while records still refer to them
"""

import logging

from flask import Flask, redirect, render_template, url_for
from werkzeug.exceptions import HTTPException

from config import Config
from controllers import catalog
from data_models import db


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(app):
    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger().setLevel(app.config["LOG_LEVEL"])


def register_error_handlers(app):
    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        """
        Render an error page for 404s and other HTTP errors.
        """
        return render_template(
            "error.html",
            title=error.name,
            status=error.code,
            message=error.description,
        ), error.code


def create_app(config_object=Config):
    """
    Application factory.
    """
    app = Flask(__name__)
    app.config.from_object(config_object)

    configure_logging(app)
    db.init_app(app)

    app.register_blueprint(catalog)

    @app.route("/")
    def home():
        return redirect(url_for("catalog.index"))

    register_error_handlers(app)

    with app.app_context():
        db.create_all()

    app.logger.info("Database ready at %s", app.config["SQLALCHEMY_DATABASE_URI"])
    return app


if __name__ == "__main__":
    create_app().run(debug=True)
