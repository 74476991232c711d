"""This module defines the repository for registered users."""

from licita_brasil.models.users import User
from licita_brasil.providers.store import MemoryStore


class UsersRepository:
    """Keeps registered users in an injected in-memory store, keyed by CNPJ."""

    store: MemoryStore[User]

    def __init__(self, store: MemoryStore[User]) -> None:
        """Initializes the repository.

        Args:
            store: The store that holds the users.
        """
        self.store = store

    def get(self, cnpj: str) -> User | None:
        """Returns the user registered under `cnpj`, or None."""
        return self.store.get(cnpj)

    def create(self, user: User) -> bool:
        """Saves a new user unless the CNPJ is already registered.

        Args:
            user: The user to save.

        Returns:
            True if the user was saved, False if the CNPJ was taken.
        """
        return self.store.add(user.cnpj, user)

    def delete(self, cnpj: str) -> None:
        """Removes the user registered under `cnpj`, if any."""
        self.store.delete(cnpj)
