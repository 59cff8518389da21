# Access Console: database models
# Import all models here for SQLAlchemy discovery

from access_console.models.app_state import AppStateEntry   # noqa
