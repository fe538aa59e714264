"""
Protocol definition for notification backends.

Defines the interface the delivery coordinator relies on and the error
raised when a message is not accepted.
"""

from typing import Protocol, runtime_checkable


class DeliveryError(Exception):
    """
    Raised when a message could not be delivered.

    Attributes
    ----------
    status : int | None
        HTTP status returned by the endpoint, or None if no response
        was received.
    body : str
        Response body or transport error text.
    """

    def __init__(self, message: str, status: int | None = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body


@runtime_checkable
class Notifier(Protocol):
    """Protocol defining the interface for notification backends."""

    async def deliver(self, text: str) -> None:
        """
        Send a text message.

        Parameters
        ----------
        text : str
            The message to send.

        Raises
        ------
        DeliveryError
            If the endpoint did not accept the message.
        """
        ...

    async def close(self) -> None:
        """Close the notifier and release any resources."""
        ...
