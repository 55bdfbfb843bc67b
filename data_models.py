from datetime import date

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

BOOK_STATUSES = ("Available", "Maintenance", "Loaned", "Reserved")


def format_date(value) -> str:
    """
    Format a date like 'Apr 10, 2023'. Returns '' for missing dates.
    """
    if not value:
        return ""
    return f"{value:%b} {value.day}, {value.year}"


def iso_date(value) -> str:
    """
    Format a date as 'YYYY-MM-DD' (for <input type="date">).
    """
    return value.isoformat() if value else ""


book_genre = db.Table(
    "book_genre",
    db.Column("book_id", db.Integer, db.ForeignKey("books.id"), primary_key=True),
    db.Column("genre_id", db.Integer, db.ForeignKey("genres.id"), primary_key=True),
)


class Author(db.Model):
    """
    Author model storing names, optional life dates and related books.
    """
    __tablename__ = 'authors'
    __table_args__ = (
        db.UniqueConstraint("first_name", "family_name", name="uq_author_name"),
    )

    # Relationship whose records block deletion.
    guarded_by = "books"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    first_name = db.Column(db.String(100), nullable=False)
    family_name = db.Column(db.String(100), nullable=False)
    date_of_birth = db.Column(db.Date, nullable=True)
    date_of_death = db.Column(db.Date, nullable=True)

    books = db.relationship("Book", back_populates="author", order_by="Book.title")

    @property
    def full_name(self) -> str:
        if self.first_name and self.family_name:
            return f"{self.first_name} {self.family_name}"
        return ""

    @property
    def url(self) -> str:
        return f"/catalog/author/{self.id}"

    @property
    def birth_date(self) -> str:
        return format_date(self.date_of_birth)

    @property
    def death_date(self) -> str:
        return format_date(self.date_of_death)

    @property
    def birth_date_iso(self) -> str:
        return iso_date(self.date_of_birth)

    @property
    def death_date_iso(self) -> str:
        return iso_date(self.date_of_death)

    @property
    def lifespan(self) -> str:
        return f"{self.birth_date} - {self.death_date}"

    def __repr__(self):
        return f"Author(id = {self.id}, name = {self.full_name})"

    def __str__(self):
        return self.full_name


class Genre(db.Model):
    """
    Genre model; books reference any number of genres.
    """
    __tablename__ = 'genres'

    guarded_by = "books"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    name = db.Column(db.String(100), nullable=False, unique=True)

    books = db.relationship(
        "Book",
        secondary=book_genre,
        back_populates="genres",
        order_by="Book.title",
    )

    @property
    def url(self) -> str:
        return f"/catalog/genre/{self.id}"

    def __repr__(self):
        return f"<Genre id={self.id} name='{self.name}'>"

    def __str__(self):
        return self.name


class Book(db.Model):
    """
    Book model storing title, summary, ISBN, author link and genres.
    """
    __tablename__ = 'books'

    guarded_by = "instances"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    title = db.Column(db.String(255), nullable=False, unique=True)
    summary = db.Column(db.Text, nullable=False)
    isbn = db.Column(db.String(32), nullable=False)

    author_id = db.Column(db.Integer, db.ForeignKey("authors.id"), nullable=False)

    author = db.relationship("Author", back_populates="books")
    genres = db.relationship(
        "Genre",
        secondary=book_genre,
        back_populates="books",
        order_by="Genre.name",
    )
    instances = db.relationship("BookInstance", back_populates="book")

    @property
    def url(self) -> str:
        return f"/catalog/book/{self.id}"

    def __repr__(self):
        return f"<Book id={self.id} title='{self.title}'>"

    def __str__(self):
        return self.title


class BookInstance(db.Model):
    """
    A physical copy of a book, with its imprint and loan status.
    """
    __tablename__ = 'book_instances'

    # Copies have no dependents; deletes are unconditional.
    guarded_by = None

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    book_id = db.Column(db.Integer, db.ForeignKey("books.id"), nullable=False)
    imprint = db.Column(db.String(255), nullable=False)
    status = db.Column(
        db.Enum(*BOOK_STATUSES, name="book_status", validate_strings=True),
        nullable=False,
        default="Maintenance",
    )
    due_back = db.Column(db.Date, nullable=False, default=date.today)

    book = db.relationship("Book", back_populates="instances")

    @property
    def url(self) -> str:
        return f"/catalog/bookinstance/{self.id}"

    @property
    def due_back_formatted(self) -> str:
        return format_date(self.due_back)

    @property
    def due_back_iso(self) -> str:
        return iso_date(self.due_back)

    def __repr__(self):
        return f"<BookInstance id={self.id} book_id={self.book_id} status='{self.status}'>"

    def __str__(self):
        return f"{self.imprint} ({self.status})"
