from dataclasses import dataclass


@dataclass(frozen=True)
class LinkStats:
    """Usage of one short code at the moment it was read.

    Attributes:
        short_code (str):
            The short code the stats belong to.
        long_url (str):
            Target the code redirects to.
        total_hits (int):
            All-time redirect count.
        weekly_hits (int):
            Redirects in the last 7 days.
        daily_hits (int):
            Redirects in the last 24 hours.

    Example:
        >>> stats = LinkStats("abCD", "https://example.com/page", 12, 5, 1)
        >>> stats.weekly_hits
        5
    """
    short_code: str
    long_url: str
    total_hits: int = 0
    weekly_hits: int = 0
    daily_hits: int = 0
