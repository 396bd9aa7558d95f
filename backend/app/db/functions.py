"""SQL functions Taskflow relies on beyond what SQLAlchemy ships.

casefold(expr) folds case the way Python's str.casefold does. SQLite's
built-in lower() only folds ASCII, so on SQLite it compiles to a Python
function registered per connection (see app.db.database); other dialects get
lower(), which is Unicode-aware on PostgreSQL.
"""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.functions import FunctionElement


class casefold(FunctionElement):
    type = String()
    name = "casefold"
    inherit_cache = True


@compiles(casefold)
def _compile_casefold(element, compiler, **kw):
    return "lower(%s)" % compiler.process(element.clauses, **kw)


@compiles(casefold, "sqlite")
def _compile_casefold_sqlite(element, compiler, **kw):
    return "casefold(%s)" % compiler.process(element.clauses, **kw)


def _py_casefold(value):
    return value.casefold() if isinstance(value, str) else value


def register_sqlite_functions(dbapi_connection) -> None:
    """Install the Python side of the functions above on a sqlite3 connection."""
    dbapi_connection.create_function("casefold", 1, _py_casefold, deterministic=True)
