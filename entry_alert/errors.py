"""
Error taxonomy.

User-correctable errors (ResolutionError, NoEventFoundError, PlayerNotFoundError,
TeamMismatchError) are surfaced to API callers. ProviderError is transient and
contained by the watcher loop. NotifierError is logged and swallowed by the watcher.
"""


class EntryAlertError(Exception):
    """Base class for all service errors."""

    code = "ERROR"
    status_code = 400


class ResolutionError(EntryAlertError):
    """Team name did not match any active team."""

    code = "TEAM_NOT_RESOLVED"
    status_code = 404


class NoEventFoundError(EntryAlertError):
    """No game scheduled inside the search window around the target date."""

    code = "NO_GAME_FOUND"
    status_code = 404


class ProviderError(EntryAlertError):
    """Data source unreachable or malformed response."""

    code = "PROVIDER_ERROR"
    status_code = 502


class PlayerNotFoundError(EntryAlertError):
    """Player is on neither roster of the game."""

    code = "PLAYER_NOT_IN_GAME"
    status_code = 404

    def __init__(self, message: str, game_state: str = "", home: str = "", away: str = ""):
        super().__init__(message)
        self.game_state = game_state
        self.home = home
        self.away = away


class TeamMismatchError(EntryAlertError):
    """Requested team is playing in neither side of the game."""

    code = "TEAM_MISMATCH"
    status_code = 409

    def __init__(self, message: str, home: str = "", away: str = ""):
        super().__init__(message)
        self.home = home
        self.away = away


class NotifierError(EntryAlertError):
    """Notification could not be delivered."""

    code = "NOTIFIER_ERROR"
    status_code = 400
