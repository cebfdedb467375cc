"""
Payment specific codes and Paymentnepal callback commands.
"""
from __future__ import annotations

from enum import IntEnum


class PaymentCode(IntEnum):
    # Generic success
    SUCCESS = 0

    # Provider/Network errors (6xxxx)
    PROVIDER_ERROR = 60000
    TRANSPORT_ERROR = 60001
    SIGNATURE_ERROR = 60002
    TIMEOUT = 60003
    UNKNOWN_SERVICE = 60004
    UNKNOWN_COMMAND = 60005


# command value -> CallbackHandler method name
CALLBACK_COMMANDS = {
    "process": "process",
    "success": "success",
    "recurrent_cancel": "recurrent_cancel",
    "refund": "refund",
}
