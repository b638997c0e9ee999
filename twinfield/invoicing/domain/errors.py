from collections.abc import Iterable


class TwinfieldError(Exception):
    """Base class for every error raised by the Twinfield SDK."""


class PreconditionFault(TwinfieldError, TypeError):
    """Caller input was rejected before any request left the process."""


class ShapeFault(TwinfieldError, ValueError):
    """A Twinfield response did not have the structure the mapper relies on."""


class RemoteServiceError(TwinfieldError):
    """Twinfield reported a fault; its messages are kept verbatim."""

    def __init__(self, messages: str | Iterable[str]) -> None:
        if isinstance(messages, str):
            messages = [messages]
        self.messages: list[str] = [message for message in messages if message]
        super().__init__(
            "; ".join(self.messages) or "Twinfield reported an unspecified error"
        )
