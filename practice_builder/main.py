from practice_builder.api import app
from practice_builder.db import init_db

init_db()

__all__ = ["app"]
