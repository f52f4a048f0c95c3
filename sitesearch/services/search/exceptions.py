"""
Search error conditions.
Malformed input is never an error; only backend failures surface here.
"""


class SearchError(Exception):
    """Base class for search failures."""

    user_message = "An error occurred while performing the search"


class SearchUnavailable(SearchError):
    """
    The content store could not answer (timeout, connection failure, crash).

    ``str(exc)`` carries the internal diagnostic for logs; ``user_message`` is
    the only text that may reach a client.
    """

    user_message = "Search is temporarily unavailable. Please try again later."
