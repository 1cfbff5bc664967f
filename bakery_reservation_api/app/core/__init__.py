"""Configuration, database access, authentication and domain errors."""
