"""Pytest bootstrap configuration.

Configure the Paymentnepal service registry before test collection and
module imports that depend on application settings.
"""
import os

os.environ.setdefault("PAYMENTNEPAL__SERVICES", '[{"service_id": 1, "secret": "s3cr3t"}]')

import pytest

from application.dtos.payments import ServiceCredentials


@pytest.fixture
def credentials() -> ServiceCredentials:
    return ServiceCredentials(service_id=1, secret="s3cr3t")


@pytest.fixture
def callback_fields() -> dict[str, str]:
    """A genuine `success` notification for service 1 (check pinned)."""
    return {
        "tid": "42",
        "service_id": "1",
        "order_id": "ord-1",
        "cost": "100.00",
        "command": "success",
        "version": "2.0",
        "check": "35d6fc56d81c703bc0155caab006e0d3",
    }
