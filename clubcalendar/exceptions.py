"""Exception hierarchy for clubcalendar.

The month-grid engine in :mod:`clubcalendar.domain` is total over well-typed
input and raises none of these; they belong to the edges of the system
(configuration, event loading, and HTTP request handling).
"""


class ClubCalendarError(Exception):
    """Base exception for all clubcalendar errors."""


class ConfigError(ClubCalendarError):
    """Configuration could not be loaded or is invalid.

    Raised when:
    - The config file exists but its top level is not a mapping
    - A timezone name cannot be resolved
    """


class EventSourceError(ClubCalendarError):
    """Event data could not be read from its source.

    Raised when an events file exists but cannot be read or decoded. Individual
    malformed events are never reported this way; they are dropped and logged.

    Should result in HTTP 502 Bad Gateway response.
    """


class CalendarRequestError(ClubCalendarError):
    """Request validation failed.

    Raised when:
    - ``year`` or ``month`` query parameters are not integers
    - A navigation action is unknown

    Should result in HTTP 400 Bad Request response.
    """
