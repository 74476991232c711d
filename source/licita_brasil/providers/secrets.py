"""This module decides which settings are secret and how to display them."""

SECRET_KEYWORDS = ("SECRET", "TOKEN", "PASS", "PWD", "CREDENTIAL", "API_KEY", "PRIVATE_KEY")


def is_secret_key(key: str) -> bool:
    """Checks if a setting name suggests it holds a secret, such as `JWT_SECRET`.

    Args:
        key: The setting name.

    Returns:
        True if the setting should be masked when displayed.
    """
    return any(keyword in key.upper() for keyword in SECRET_KEYWORDS)


def mask_value(value: str | None) -> str:
    """Masks a secret value, showing only its last 4 characters.

    Args:
        value: The value to mask.

    Returns:
        The masked value.
    """
    if value is None:
        return "Not set"
    if len(value) < 8:
        return "****"
    return f"****{value[-4:]}"
