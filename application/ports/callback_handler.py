"""
Callback handler port implemented by the embedding application.

One method per callback ``command``. Each receives the verified payload.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from application.dtos.payments import CallbackPayload


@runtime_checkable
class CallbackHandler(Protocol):
    def process(self, data: CallbackPayload) -> None:
        """Any payment event, partial payments included."""
        ...

    def success(self, data: CallbackPayload) -> None:
        """The order is paid in full."""
        ...

    def recurrent_cancel(self, data: CallbackPayload) -> None:
        """The cardholder cancelled recurrent payments."""
        ...

    def refund(self, data: CallbackPayload) -> None:
        """Refund result."""
        ...


class NoopCallbackHandler:
    """Accepts every callback and does nothing; override what you need."""

    def process(self, data: CallbackPayload) -> None:
        return None

    def success(self, data: CallbackPayload) -> None:
        return None

    def recurrent_cancel(self, data: CallbackPayload) -> None:
        return None

    def refund(self, data: CallbackPayload) -> None:
        return None
