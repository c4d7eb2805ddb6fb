"""Authentication backend: logins, sessions and invitation-based sign-up over MongoDB."""

__version__ = "0.1.0"