"""Exceptions raised inside TickerHug."""


class TickerHugError(Exception):
    """Base class for TickerHug errors."""


class FetchError(TickerHugError):
    """A data source could not be read (network, HTTP status or payload)."""

    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source


class DispatchError(TickerHugError):
    """An SMS provider rejected the message or could not be reached."""
