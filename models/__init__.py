from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

from .storage import StoredValue  # noqa: E402,F401
