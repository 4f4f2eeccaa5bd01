"""Error taxonomy for the game client.

Every error's ``str()`` is the text shown in the single error slot of the UI.
"""


class ClientError(RuntimeError):
    """Base class for errors surfaced to the user."""


class ConnectError(ClientError):
    """The initial dial failed. Terminal for the session."""


class ReadError(ClientError):
    """The transport failed while waiting for a frame."""

    def __init__(self, message: str, *, closed: bool = False):
        super().__init__(message)
        self.closed = closed


class DecodeError(ClientError):
    """A frame arrived but was malformed or had an unexpected shape."""


class WriteError(ClientError):
    """An outbound frame (user text or keepalive ping) could not be written."""
