"""Shared SQLAlchemy base declarative class and model imports."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for ORM models."""


# Import model modules so metadata is populated before create_all.
from pos_terminal.models import app_setting as _app_setting  # noqa: E402,F401
from pos_terminal.models import audit_log as _audit_log  # noqa: E402,F401
from pos_terminal.models import catalog as _catalog  # noqa: E402,F401
from pos_terminal.models import dining_table as _dining_table  # noqa: E402,F401
from pos_terminal.models import geo as _geo  # noqa: E402,F401
from pos_terminal.models import order as _order  # noqa: E402,F401
from pos_terminal.models import payment as _payment  # noqa: E402,F401
from pos_terminal.models import promo as _promo  # noqa: E402,F401
from pos_terminal.models import terminal as _terminal  # noqa: E402,F401
