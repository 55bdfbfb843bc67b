import os


class Config:
    """
    Default settings; each can be overridden through the environment.
    """
    SECRET_KEY = os.getenv("LIBRARY_SECRET_KEY", "dev-secret-key")     # Dev only.

    # Relative SQLite paths land in the Flask instance folder.
    SQLALCHEMY_DATABASE_URI = os.getenv("LIBRARY_DATABASE_URI", "sqlite:///library.sqlite")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.getenv("LIBRARY_LOG_LEVEL", "INFO")


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    LOG_LEVEL = "DEBUG"
