"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(strict_slash=True, panic_recovery=True)
    """

    # Routing
    strict_slash: bool = False  # "/abc" and "/abc/" are different paths
    panic_recovery: bool = False  # handler exceptions become 500 errors

    # Show tracebacks in 500 responses
    debug: bool = False

    # Upper bound for a single TestClient request, in seconds
    request_timeout: float = 5.0
