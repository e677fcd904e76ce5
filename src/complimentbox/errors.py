"""Error taxonomy shared by the store, services and realtime layer.

ValidationError and PersistenceError reach the HTTP caller as explicit
failure responses. DeliveryFault never leaves the realtime layer: it is
logged per subscriber and the subscriber catches up via history.
"""


class ComplimentError(Exception):
    """Base class for all complimentbox errors."""


class ValidationError(ComplimentError):
    """Raised when a code or message is missing or blank."""


class PersistenceError(ComplimentError):
    """Raised when the compliment store cannot read or write."""


class DeliveryFault(ComplimentError):
    """Raised when a live push to one subscriber fails."""
