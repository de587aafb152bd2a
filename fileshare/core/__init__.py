"""Core app configuration, database and security."""
