"""This module provides a manager for the .env file read by `Config`."""

from pathlib import Path

from dotenv import dotenv_values, set_key, unset_key


class ConfigManager:
    """Reads and edits the .env file that overrides the application settings."""

    def __init__(self, env_file: str | Path = ".env") -> None:
        """Initializes the ConfigManager, creating the file if it is missing.

        The file is created with owner-only permissions since it usually
        holds `JWT_SECRET`.

        Args:
            env_file: The path to the .env file.
        """
        self.env_file = Path(env_file)
        if not self.env_file.exists():
            self.env_file.touch(mode=0o600)

    def get_all(self) -> dict[str, str | None]:
        """Returns every key-value pair in the .env file, in file order."""
        return dict(dotenv_values(self.env_file))

    def get(self, key: str) -> str | None:
        """Returns the value of `key`, or None if it is not set."""
        return self.get_all().get(key)

    def set(self, key: str, value: str) -> None:
        """Sets `key` to `value`, adding the key if needed."""
        set_key(self.env_file, key, value)

    def unset(self, key: str) -> bool:
        """Removes `key` from the .env file.

        Args:
            key: The key to remove.

        Returns:
            True if the key was present and removed.
        """
        if key not in self.get_all():
            return False
        removed, _ = unset_key(self.env_file, key)
        return bool(removed)
