"""liftbook: a personal workout log with cloud sync."""

__version__ = "0.1.0"
