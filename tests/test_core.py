"""Tests for core infrastructure modules."""

from unittest.mock import MagicMock
import asyncio
import logging
import pytest
from pydantic import ValidationError

from vmkit.base.config import LifecycleSettings, ProviderContext, validate_context
from vmkit.base.cache import TTLCache
from vmkit.base.logger import VmkitLogger, StructuredFormatter
from vmkit.base.async_support import async_wrap


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


# ══════════════════════════════════════════════════════════════════════
# Config
# ══════════════════════════════════════════════════════════════════════

class TestProviderContext:
    def test_explicit_values(self):
        ctx = ProviderContext(
            account_number="1234",
            region_id="us-west-2",
            provider_name="AWS",
            cloud_name="EC2",
        )
        assert ctx.account_number == "1234"
        assert ctx.region_id == "us-west-2"
        assert ctx.custom_properties == {}
        assert ctx.catalog_override is None

    def test_env_fallback(self, monkeypatch):
        monkeypatch.setenv("DSN_ACCOUNT", "env-account")
        monkeypatch.setenv("DSN_REGION", "eu-west-1")
        monkeypatch.setenv("DSN_CLOUD_PROVIDER", "AWS")
        monkeypatch.setenv("DSN_CLOUD_NAME", "EC2")
        ctx = ProviderContext()
        assert ctx.account_number == "env-account"
        assert ctx.region_id == "eu-west-1"
        assert ctx.provider_name == "AWS"
        assert ctx.cloud_name == "EC2"

    def test_custom_properties_from_env(self, monkeypatch):
        monkeypatch.setenv("DSN_CUSTOM_vmproducts", "/etc/env.json")
        monkeypatch.setenv("DSN_CUSTOM_domain", "example.com")
        monkeypatch.setenv("DSN_API_VERSION", "2012-09")
        ctx = ProviderContext(account_number="a", region_id="r")
        assert ctx.custom_properties["domain"] == "example.com"
        assert ctx.custom_properties["apiVersion"] == "2012-09"
        assert ctx.catalog_override == "/etc/env.json"

    def test_explicit_custom_property_wins(self, monkeypatch):
        monkeypatch.setenv("DSN_CUSTOM_vmproducts", "/etc/env.json")
        ctx = ProviderContext(
            account_number="a",
            region_id="r",
            custom_properties={"vmproducts": "/etc/explicit.json"},
        )
        assert ctx.catalog_override == "/etc/explicit.json"

    def test_upper_case_catalog_property(self, monkeypatch):
        monkeypatch.setenv("DSN_CUSTOM_VMPRODUCTS", "/etc/upper.json")
        ctx = ProviderContext(account_number="a", region_id="r")
        assert ctx.custom_properties == {"VMPRODUCTS": "/etc/upper.json"}
        assert ctx.catalog_override == "/etc/upper.json"

    def test_exact_catalog_property_beats_other_case(self):
        ctx = ProviderContext(
            account_number="a",
            region_id="r",
            custom_properties={"VmProducts": "/etc/mixed.json", "vmproducts": "/etc/exact.json"},
        )
        assert ctx.catalog_override == "/etc/exact.json"

    def test_region_required(self):
        with pytest.raises(ValidationError, match="region_id is required"):
            ProviderContext(account_number="a")

    def test_account_required(self):
        with pytest.raises(ValidationError, match="account_number is required"):
            ProviderContext(region_id="r")

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            ProviderContext(account_number="a", region_id="r", password="x")


class TestValidateContext:
    def test_valid(self):
        ctx = validate_context({"account_number": "a", "region_id": "r"})
        assert isinstance(ctx, ProviderContext)
        assert ctx.region_id == "r"

    def test_invalid(self):
        with pytest.raises(ValidationError):
            validate_context({"account_number": "a"})


class TestLifecycleSettings:
    def test_defaults(self):
        settings = LifecycleSettings()
        assert settings.stop_timeout == 300
        assert settings.stop_poll_interval == 10
        assert settings.reboot_timeout == 300
        assert settings.reboot_poll_interval == 10

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("VMKIT_STOP_TIMEOUT", "60")
        monkeypatch.setenv("VMKIT_REBOOT_POLL_INTERVAL", "2.5")
        settings = LifecycleSettings()
        assert settings.stop_timeout == 60
        assert settings.reboot_poll_interval == 2.5

    def test_explicit_beats_env(self, monkeypatch):
        monkeypatch.setenv("VMKIT_STOP_TIMEOUT", "60")
        assert LifecycleSettings(stop_timeout=5).stop_timeout == 5

    def test_non_positive_rejected(self):
        with pytest.raises(ValidationError):
            LifecycleSettings(stop_poll_interval=0)


# ══════════════════════════════════════════════════════════════════════
# TTL Cache
# ══════════════════════════════════════════════════════════════════════

class TestTTLCache:
    def test_miss(self):
        assert TTLCache().get(("a", "r", "I64")) is None

    def test_hit_within_ttl(self):
        clock = FakeClock()
        cache = TTLCache(clock=clock)
        cache.put(("a", "r", "I64"), ("p1",), ttl=10)
        clock.now = 9.9
        assert cache.get(("a", "r", "I64")) == ("p1",)

    def test_expired_entry_not_returned(self):
        clock = FakeClock()
        cache = TTLCache(clock=clock)
        cache.put("k", "v", ttl=10)
        clock.now = 10
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_keys_are_independent(self):
        cache = TTLCache()
        cache.put(("a", "r1", "I64"), "one", ttl=10)
        cache.put(("a", "r2", "I64"), "two", ttl=10)
        assert cache.get(("a", "r1", "I64")) == "one"
        assert cache.get(("a", "r2", "I64")) == "two"

    def test_last_writer_wins(self):
        cache = TTLCache()
        cache.put("k", "v1", ttl=10)
        cache.put("k", "v2", ttl=10)
        assert cache.get("k") == "v2"

    def test_get_or_create(self):
        cache = TTLCache()
        factory = MagicMock(return_value=("x",))
        assert cache.get_or_create("k", 10, factory) == ("x",)
        assert cache.get_or_create("k", 10, factory) == ("x",)
        factory.assert_called_once()

    def test_get_or_create_after_expiry(self):
        clock = FakeClock()
        cache = TTLCache(clock=clock)
        factory = MagicMock(side_effect=["v1", "v2"])
        cache.get_or_create("k", 10, factory)
        clock.now = 11
        assert cache.get_or_create("k", 10, factory) == "v2"

    def test_invalidate_and_clear(self):
        cache = TTLCache()
        cache.put("a", 1, ttl=10)
        cache.put("b", 2, ttl=10)
        cache.invalidate("a")
        assert cache.get("a") is None
        cache.clear()
        assert cache.get("b") is None

    def test_rejects_non_positive_ttl(self):
        with pytest.raises(ValueError):
            TTLCache().put("k", "v", ttl=0)


# ══════════════════════════════════════════════════════════════════════
# Logger
# ══════════════════════════════════════════════════════════════════════

class TestVmkitLogger:
    def test_log_operation(self, capfd):
        logger = VmkitLogger("test_vmkit")
        logger.logger.setLevel(logging.DEBUG)
        logger.info("stopping", provider="AWS", operation="stop", vm_id="i-123")
        captured = capfd.readouterr()
        assert "stopping" in captured.err
        assert '"vm_id": "i-123"' in captured.err

    def test_levels(self, capfd):
        logger = VmkitLogger("test_vmkit_levels")
        logger.logger.setLevel(logging.DEBUG)
        logger.debug("polling", operation="stop")
        logger.warning("gave up", operation="reboot", vm_id="i-9")
        err = capfd.readouterr().err
        assert '"level": "DEBUG"' in err
        assert '"level": "WARNING"' in err

    def test_structured_formatter(self):
        fmt = StructuredFormatter()
        record = logging.LogRecord(
            name="test", level=logging.INFO, pathname="", lineno=0,
            msg="hi", args=(), exc_info=None,
        )
        record.region = "us-east-1"
        record.request_id = "abc"
        output = fmt.format(record)
        assert '"region": "us-east-1"' in output
        assert '"request_id": "abc"' in output
        assert "vm_id" not in output


# ══════════════════════════════════════════════════════════════════════
# Async Support
# ══════════════════════════════════════════════════════════════════════

class TestAsyncWrap:
    def test_basic(self):
        def sync_fn(x: int) -> int:
            return x * 2

        async_fn = async_wrap(sync_fn)
        assert asyncio.run(async_fn(5)) == 10

    def test_preserves_name(self):
        def my_func():
            pass

        wrapped = async_wrap(my_func)
        assert wrapped.__name__ == "my_func"

    def test_as_method(self):
        class Service:
            def work(self, value: str) -> str:
                return value.upper()

            awork = async_wrap(work)

        assert asyncio.run(Service().awork("done")) == "DONE"
