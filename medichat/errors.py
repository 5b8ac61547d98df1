"""
Error taxonomy for the session engine.

- PreconditionError:      missing input or missing credential (never reaches the network)
- ResponseError:          transport failure or structurally invalid response
- ValidationError:        malformed turn appended to the session store
- InvalidTransitionError: illegal phase change (e.g. pending -> pending)
"""


class MedichatError(Exception):
    """Base class for all engine errors. `message` is safe to show to the user."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class PreconditionError(MedichatError):
    pass


class ResponseError(MedichatError):
    pass


class ValidationError(MedichatError):
    pass


class InvalidTransitionError(MedichatError):
    pass
