"""CLI commands for liftbook."""

from .export import export, import_data
from .init import init
from .serve import serve
from .session import login, logout, whoami
from .stats import stats
from .workouts import add, delete, edit, list_workouts, show

__all__ = [
    "add",
    "delete",
    "edit",
    "export",
    "import_data",
    "init",
    "list_workouts",
    "login",
    "logout",
    "serve",
    "show",
    "stats",
    "whoami",
]
