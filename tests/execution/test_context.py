"""Tests for suitectl.execution.context — per-invocation context."""

from __future__ import annotations

import pytest

from suitectl.core.config import SuiteSettings
from suitectl.core.errors import ConfigError
from suitectl.execution.context import InvocationContext


class TestInvocationContext:
    def test_stream_output_implies_compress(self, settings):
        ctx = InvocationContext(settings=settings, stream_output=True)
        assert ctx.compress_output is True

    def test_settings_supply_output_mode(self):
        ctx = InvocationContext(settings=SuiteSettings(compress_output=True))
        assert ctx.compress_output is True
        assert ctx.stream_output is False

    def test_pacing_from_flag_or_settings(self):
        settings = SuiteSettings(standard_delay_ms=250)
        assert InvocationContext(settings=settings).pacing == 0.25
        assert InvocationContext(settings=settings, delay_ms=0).pacing == 0.0

    def test_negative_delay(self, settings):
        with pytest.raises(ConfigError):
            InvocationContext(settings=settings, delay_ms=-5)

    def test_retry_policy_merges_retry_on(self):
        settings = SuiteSettings(retry_on=[403], retry_max_attempts=2)
        policy = InvocationContext(settings=settings, retry_on=(409,)).retry_policy
        assert policy.retry_on == frozenset({403, 409})
        assert policy.max_attempts == 2

    def test_client_is_created_once(self, settings):
        created = []

        def factory(value):
            created.append(value)
            return object()

        ctx = InvocationContext(settings=settings, client_factory=factory)
        assert ctx.client is ctx.client
        assert created == [settings]

    def test_close_closes_client(self, invocation, fake_client):
        assert invocation.client is fake_client
        invocation.close()
        assert fake_client.closed

    def test_request_ids_are_unique(self, settings):
        assert InvocationContext(settings=settings).request_id != InvocationContext(settings=settings).request_id


class TestResolveWorkers:
    def test_flag_wins(self):
        ctx = InvocationContext(settings=SuiteSettings(batch_threads=4))
        assert ctx.resolve_workers(6) == 6

    def test_settings_default(self):
        ctx = InvocationContext(settings=SuiteSettings(batch_threads=4))
        assert ctx.resolve_workers() == 4

    @pytest.mark.parametrize("workers", [0, -2])
    def test_non_positive_is_rejected(self, workers):
        ctx = InvocationContext(settings=SuiteSettings())
        with pytest.raises(ConfigError):
            ctx.resolve_workers(workers)

    def test_capped_at_max_threads(self):
        ctx = InvocationContext(settings=SuiteSettings(max_threads=8))
        assert ctx.resolve_workers(50) == 8
