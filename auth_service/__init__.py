"""User authentication service: registration, login, self lookup, refresh token rotation."""

__version__ = "0.1.0"
