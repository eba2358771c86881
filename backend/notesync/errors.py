"""Error taxonomy shared by the note service and the sync client."""


class NotesSyncError(Exception):
    """Base class for every failure surfaced by notesync."""

    status_code: int = 500

    def __init__(self, message: str = "An error occurred") -> None:
        super().__init__(message)
        self.message = message


class ValidationError(NotesSyncError):
    """Malformed request, rejected before the store is touched."""

    status_code = 400


class AuthError(NotesSyncError):
    """Missing, invalid or expired credential."""

    status_code = 401


class NotFoundOrUnauthorized(NotesSyncError):
    """Row is absent or owned by someone else. The two cases are not distinguished."""

    status_code = 404


class ServerError(NotesSyncError):
    """Non-2xx application response not covered by a more specific class."""

    def __init__(self, message: str = "An error occurred", status_code: int = 500) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransientServerError(ServerError):
    """Store unavailable or transaction failure (5xx)."""


class TransportError(NotesSyncError):
    """Request never produced an HTTP response."""

    status_code = 0
