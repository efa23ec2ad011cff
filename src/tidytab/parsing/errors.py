"""Exceptions raised while setting up or running parsers."""


class ParseError(ValueError):
    """A single token could not be parsed as the requested type.

    Raised by scalar parsers; column parsing turns it into a Problem.
    """

    def __init__(self, token: str, expected: str):
        self.token = token
        self.expected = expected
        super().__init__(f"Expected {expected}, got {token!r}")


class FormatError(ValueError):
    """A date/time format string is invalid."""


class ColumnSpecError(ValueError):
    """A column type specification is invalid."""
