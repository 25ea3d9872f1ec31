"""Database layer: engine/session management, models and repositories."""
