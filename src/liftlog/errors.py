"""Exceptions raised by the repository and service layers."""


class LiftLogError(Exception):
    """Base class for application errors."""


class NotFoundError(LiftLogError):
    """A requested row does not exist or belongs to another user."""

    def __init__(self, kind: str, ident: object):
        super().__init__(f"{kind} {ident} not found")
        self.kind = kind
        self.ident = ident


class ValidationError(LiftLogError):
    """Input that passed schema validation but is not acceptable."""
