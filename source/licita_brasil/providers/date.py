"""This module provides centralized date-related utilities."""

from datetime import date, datetime, timezone


class DateProvider:
    """Provides centralized constants and methods for date handling.

    This class centralizes date-related formats and logic to ensure
    consistency across the application. The PNCP query API expects compact
    `YYYYMMDD` dates, while the rest of the application uses ISO dates.
    """

    DATE_FORMAT = "%Y-%m-%d"
    PNCP_DATE_FORMAT = "%Y%m%d"

    @classmethod
    def parse_query_date(cls, value: str | date) -> date:
        """Parses a date given either as `YYYYMMDD` or as `YYYY-MM-DD`.

        Args:
            value: The raw date, or an already parsed `date`.

        Returns:
            The parsed date.

        Raises:
            ValueError: If the value matches neither format.
        """
        if isinstance(value, date):
            return value
        text = value.strip()
        for fmt in (cls.PNCP_DATE_FORMAT, cls.DATE_FORMAT):
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue
        raise ValueError(f"Invalid date '{value}'. Use YYYYMMDD or YYYY-MM-DD.")

    @classmethod
    def to_pncp(cls, value: date) -> str:
        """Formats a date the way the PNCP query API expects it."""
        return value.strftime(cls.PNCP_DATE_FORMAT)

    @staticmethod
    def parse_timestamp(value: str | None) -> datetime | None:
        """Parses a PNCP timestamp, returning None when it is absent or malformed.

        PNCP publishes local timestamps such as `2024-01-15T10:30:00`, and
        sometimes plain dates. Timezone-aware values are converted to naive
        UTC so that every parsed value can be compared with every other.

        Args:
            value: The raw timestamp string.

        Returns:
            A naive datetime, or None.
        """
        if not value:
            return None
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        return parsed
