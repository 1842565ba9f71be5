"""Persistence module for the todo client."""

from todo_client.persistence.credentials import CredentialStore

__all__ = [
    "CredentialStore",
]
