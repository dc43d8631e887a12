"""
Pydantic configuration models for provider context and lifecycle timing.

Validates the request scope at construction time instead of failing
halfway through a catalog resolution or a polling loop.
"""

from __future__ import annotations

import os
from typing import Any
from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, model_validator

CUSTOM_PROPERTY_PREFIX = "DSN_CUSTOM_"


class ProviderContext(BaseModel):
    """Scope of a request against one cloud backend.

    Values are resolved in order:
    1. Explicit values passed in the config dict.
    2. Environment variables (DSN_ACCOUNT, DSN_REGION, DSN_CLOUD_PROVIDER,
       DSN_CLOUD_NAME, DSN_ENDPOINT).
    3. Custom properties are merged from ``DSN_CUSTOM_<name>`` variables and
       ``DSN_API_VERSION`` (stored as ``apiVersion``); explicit entries win.
    """

    model_config = ConfigDict(extra="forbid")

    account_number: str | None = Field(default=None, description="Account scope")
    region_id: str | None = Field(default=None, description="Region scope (e.g. 'us-east-1')")
    provider_name: str | None = Field(default=None, description="Cloud provider name")
    cloud_name: str | None = Field(default=None, description="Cloud name within the provider")
    endpoint: str | None = Field(default=None, description="API endpoint of the cloud")
    custom_properties: dict[str, str] = Field(
        default_factory=dict, description="Implementation-specific properties"
    )

    @model_validator(mode="before")
    @classmethod
    def resolve_from_env(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Fall back to environment variables for missing scope values."""
        values = dict(values)
        env_map = {
            "account_number": "DSN_ACCOUNT",
            "region_id": "DSN_REGION",
            "provider_name": "DSN_CLOUD_PROVIDER",
            "cloud_name": "DSN_CLOUD_NAME",
            "endpoint": "DSN_ENDPOINT",
        }
        for field, env_var in env_map.items():
            if not values.get(field):
                values[field] = os.environ.get(env_var)

        properties: dict[str, str] = {}
        version = os.environ.get("DSN_API_VERSION")
        if version:
            properties["apiVersion"] = version
        for name, value in os.environ.items():
            if name.startswith(CUSTOM_PROPERTY_PREFIX) and len(name) > len(CUSTOM_PROPERTY_PREFIX):
                properties[name[len(CUSTOM_PROPERTY_PREFIX):]] = value
        properties.update(values.get("custom_properties") or {})
        values["custom_properties"] = properties
        return values

    @model_validator(mode="after")
    def validate_scope(self) -> ProviderContext:
        """Ensure the account and region scopes are set."""
        if self.account_number is None:
            raise ValueError(
                "account_number is required. Set it explicitly or via DSN_ACCOUNT."
            )
        if self.region_id is None:
            raise ValueError("region_id is required. Set it explicitly or via DSN_REGION.")
        return self

    @property
    def catalog_override(self) -> str | None:
        """Explicit catalog document location, if one was configured.

        The key is matched case-insensitively, so ``DSN_CUSTOM_VMPRODUCTS``
        works as well as ``DSN_CUSTOM_vmproducts``; an exact ``vmproducts``
        entry wins.
        """
        if "vmproducts" in self.custom_properties:
            return self.custom_properties["vmproducts"]
        for name, value in self.custom_properties.items():
            if name.lower() == "vmproducts":
                return value
        return None


class LifecycleSettings(BaseModel):
    """Wait budgets for the stop/reboot polling loops, in seconds.

    Each value may be overridden through ``VMKIT_<FIELD_NAME>`` in the
    environment (e.g. ``VMKIT_STOP_TIMEOUT=120``).
    """

    model_config = ConfigDict(extra="forbid")

    stop_timeout: PositiveFloat = Field(default=300.0, description="Stop wait budget")
    stop_poll_interval: PositiveFloat = Field(default=10.0, description="Delay between stop polls")
    reboot_timeout: PositiveFloat = Field(default=300.0, description="Reboot wait budget")
    reboot_poll_interval: PositiveFloat = Field(
        default=10.0, description="Delay between reboot polls"
    )

    @model_validator(mode="before")
    @classmethod
    def resolve_from_env(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Fall back to environment variables for unset timings."""
        values = dict(values)
        for field in ("stop_timeout", "stop_poll_interval", "reboot_timeout", "reboot_poll_interval"):
            if values.get(field) is None:
                env_value = os.environ.get(f"VMKIT_{field.upper()}")
                if env_value:
                    values[field] = env_value
        return values


def validate_context(config: dict) -> ProviderContext:
    """Validate and return a typed provider context.

    Args:
        config: Raw context dictionary.

    Returns:
        A validated :class:`ProviderContext`.

    Raises:
        pydantic.ValidationError: If the context is invalid.
    """
    return ProviderContext(**config)


__all__ = [
    "ProviderContext",
    "LifecycleSettings",
    "validate_context",
]
