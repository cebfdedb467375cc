"""
Payment-related settings using pydantic-settings v2 with nested env keys.

Example:
    PAYMENTNEPAL__SERVICES='[{"service_id": 1, "secret": "s3cr3t"}]'
    PAYMENTNEPAL__TEST_MODE=true
"""
from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field

from application.dtos.payments import ServiceCredentials


class PaymentnepalSettings(BaseModel):
    base_url: str = "https://pay.paymentnepal.com/"
    card_token_url: str = "https://secure.paymentnepal.com/cardtoken/"
    card_token_test_url: str = "https://test.paymentnepal.com/cardtoken/"
    # Seconds; applied to the whole request
    timeout: float = 45.0
    test_mode: bool = False
    # Drop non-80 ports from the signed host (public URL behind a proxy)
    skip_port: bool = False
    services: list[ServiceCredentials] = Field(default_factory=list)


class PaymentSettings(BaseSettings):
    paymentnepal: PaymentnepalSettings = Field(default_factory=PaymentnepalSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        env_nested_delimiter="__",
    )


payment_settings = PaymentSettings()
