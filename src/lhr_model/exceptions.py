"""Exceptions raised by lhr-model.

Run-level failures of an audit run are data (see ``lhr_model.errors``), not
exceptions. The classes here cover the codec and schema misuse.
"""


class LhrError(Exception):
    """Base exception for all library-specific errors."""

    def __init__(self, message: str, hint: str | None = None):
        self.hint = hint
        super().__init__(message)

    def __str__(self) -> str:
        msg = super().__str__()
        return f"{msg}. {self.hint}" if self.hint else msg


class DecodeError(LhrError):
    """A wire tree could not be read into a record.

    ``path`` names the offending field, e.g. ``audits[speed-index].id``.
    """

    def __init__(self, path: str, message: str, hint: str | None = None):
        self.path = path
        self.reason = message
        super().__init__(f"{path or '<root>'}: {message}", hint)


class EncodeError(LhrError):
    """A record could not be written, usually because a required field is unset."""

    def __init__(self, path: str, message: str, hint: str | None = None):
        self.path = path
        self.reason = message
        super().__init__(f"{path or '<root>'}: {message}", hint)
