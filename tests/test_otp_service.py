# tests/test_otp_service.py
import logging
import threading

import pytest

from vendoriq.core.redis import RedisClient
from vendoriq.services import otp_service
from vendoriq.services.notifier import Notifier
from vendoriq.services.otp_service import (
    OTPManager,
    VerifyReason,
    build_otp_manager,
    generate_otp_code,
)
from vendoriq.services.otp_store import FallbackPasscodeStore, MemoryPasscodeStore, RedisPasscodeStore


class RecordingNotifier(Notifier):
    def __init__(self):
        self.sent = []

    def send(self, identifier, code):
        self.sent.append((identifier, code))
        return True


class BrokenNotifier(Notifier):
    def send(self, identifier, code):
        raise RuntimeError("SMTP relay refused connection")


@pytest.fixture
def codes(monkeypatch):
    """Make generated codes predictable"""
    sequence = iter(["111111", "222222", "333333", "444444"])
    monkeypatch.setattr(otp_service, "generate_otp_code", lambda: next(sequence))


def test_generated_codes_are_six_digits():
    for _ in range(200):
        code = generate_otp_code()
        assert len(code) == 6
        assert code.isdigit()
        assert 100000 <= int(code) <= 999999


class TestIssueAndVerify:
    """Passcode lifecycle on the memory-backed manager"""

    def test_correct_code_verifies_exactly_once(self, otp_manager):
        issued = otp_manager.issue("a@example.com", subject_hint="user-1")

        result = otp_manager.verify("a@example.com", issued.code)
        assert result.ok
        assert result.reason is VerifyReason.OK
        assert result.subject_hint == "user-1"

        again = otp_manager.verify("a@example.com", issued.code)
        assert not again.ok
        assert again.reason is VerifyReason.NO_ACTIVE_CODE

    def test_verify_before_issue_reports_no_active_code(self, otp_manager):
        result = otp_manager.verify("never@example.com", "123456")

        assert not result.ok
        assert result.reason is VerifyReason.NO_ACTIVE_CODE

    def test_expiry_is_five_minutes_from_issue(self, otp_manager, clock):
        issued = otp_manager.issue("a@example.com")

        assert issued.expires_at == clock() + otp_service.OTP_LIFETIME

    def test_wrong_code_does_not_consume_record(self, otp_manager, codes):
        otp_manager.issue("a@example.com")

        assert otp_manager.verify("a@example.com", "999999").reason is VerifyReason.MISMATCH
        assert otp_manager.verify("a@example.com", "999999").reason is VerifyReason.MISMATCH
        assert otp_manager.verify("a@example.com", "111111").ok

    def test_code_comparison_is_exact(self, otp_manager, codes):
        otp_manager.issue("a@example.com")

        assert otp_manager.verify("a@example.com", " 111111").reason is VerifyReason.MISMATCH

    def test_reissue_supersedes_previous_code(self, otp_manager, codes):
        first = otp_manager.issue("a@example.com")
        second = otp_manager.issue("a@example.com")

        assert otp_manager.verify("a@example.com", first.code).reason is VerifyReason.MISMATCH
        assert otp_manager.verify("a@example.com", second.code).ok

    def test_code_expires_after_lifetime(self, otp_manager, clock):
        issued = otp_manager.issue("a@example.com")
        clock.advance(minutes=5, seconds=1)

        result = otp_manager.verify("a@example.com", issued.code)
        assert not result.ok
        assert result.reason is VerifyReason.EXPIRED

    def test_code_valid_at_exact_expiry_instant(self, otp_manager, clock):
        issued = otp_manager.issue("a@example.com")
        clock.advance(minutes=5)

        assert otp_manager.verify("a@example.com", issued.code).ok

    def test_mismatch_is_reported_before_expiry(self, otp_manager, clock, codes):
        otp_manager.issue("a@example.com")
        clock.advance(minutes=10)

        assert otp_manager.verify("a@example.com", "999999").reason is VerifyReason.MISMATCH
        assert otp_manager.verify("a@example.com", "111111").reason is VerifyReason.EXPIRED

    def test_distinct_identifiers_are_independent(self, otp_manager):
        issued = {}

        def issue(identifier):
            issued[identifier] = otp_manager.issue(identifier)

        threads = [threading.Thread(target=issue, args=(i,)) for i in ("a@example.com", "+919876543210")]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert otp_manager.verify("a@example.com", issued["a@example.com"].code).ok
        assert otp_manager.verify("+919876543210", issued["+919876543210"].code).ok


class TestDelivery:
    def test_notifier_receives_identifier_and_code(self, otp_manager):
        notifier = RecordingNotifier()

        issued = otp_manager.issue("a@example.com", notifier=notifier)

        assert notifier.sent == [("a@example.com", issued.code)]

    def test_default_notifier_used_when_none_given(self, clock):
        notifier = RecordingNotifier()
        manager = OTPManager(FallbackPasscodeStore(None, MemoryPasscodeStore(clock)), notifier=notifier, clock=clock)

        manager.issue("+919876543210")

        assert notifier.sent[0][0] == "+919876543210"
        manager.close()

    def test_delivery_failure_does_not_fail_issue(self, otp_manager, caplog):
        with caplog.at_level(logging.ERROR):
            issued = otp_manager.issue("a@example.com", notifier=BrokenNotifier())

        assert otp_manager.verify("a@example.com", issued.code).ok
        assert "Failed to deliver OTP" in caplog.text

    def test_codes_logged_only_when_enabled(self, clock, caplog):
        quiet = OTPManager(FallbackPasscodeStore(None, MemoryPasscodeStore(clock)), clock=clock)
        chatty = OTPManager(FallbackPasscodeStore(None, MemoryPasscodeStore(clock)), clock=clock, log_codes=True)

        with caplog.at_level(logging.INFO):
            hidden = quiet.issue("quiet@example.com")
            shown = chatty.issue("chatty@example.com")

        assert hidden.code not in caplog.text
        assert shown.code in caplog.text
        quiet.close()
        chatty.close()


class TestCacheFallback:
    """Flows across the Redis store and the memory fallback"""

    def build(self, stub_redis, clock):
        cache = RedisClient(client=stub_redis, retry_seconds=0)
        store = FallbackPasscodeStore(RedisPasscodeStore(cache), MemoryPasscodeStore(clock))
        return OTPManager(store, clock=clock)

    def test_flow_through_cache(self, stub_redis, clock):
        manager = self.build(stub_redis, clock)

        issued = manager.issue("a@example.com")
        assert "otp:a@example.com" in stub_redis.data
        assert stub_redis.ttls["otp:a@example.com"] == 300

        assert manager.verify("a@example.com", issued.code).ok
        assert "otp:a@example.com" not in stub_redis.data
        manager.close()

    def test_flow_succeeds_with_cache_down_throughout(self, stub_redis, clock):
        stub_redis.down = True
        manager = self.build(stub_redis, clock)

        issued = manager.issue("a@example.com")
        assert manager.backend == "memory"
        assert manager.verify("a@example.com", issued.code).ok
        assert manager.verify("a@example.com", issued.code).reason is VerifyReason.NO_ACTIVE_CODE
        manager.close()

    def test_code_issued_during_outage_verifies_after_recovery(self, stub_redis, clock):
        stub_redis.down = True
        manager = self.build(stub_redis, clock)
        issued = manager.issue("a@example.com")

        stub_redis.down = False
        assert manager.backend == "redis"
        assert manager.verify("a@example.com", issued.code).ok
        assert len(manager.store.fallback) == 0
        manager.close()

    def test_success_clears_both_stores(self, stub_redis, clock, codes):
        manager = self.build(stub_redis, clock)
        stub_redis.down = True
        manager.issue("a@example.com")  # 111111 into memory
        stub_redis.down = False
        manager.issue("a@example.com")  # 222222 into redis

        assert manager.verify("a@example.com", "222222").ok
        assert manager.verify("a@example.com", "111111").reason is VerifyReason.NO_ACTIVE_CODE
        manager.close()

    def test_expired_code_from_cache(self, stub_redis, clock):
        manager = self.build(stub_redis, clock)
        issued = manager.issue("a@example.com")
        clock.advance(minutes=6)

        assert manager.verify("a@example.com", issued.code).reason is VerifyReason.EXPIRED
        manager.close()


class TestBuildOtpManager:
    def test_without_cache_uses_memory(self):
        manager = build_otp_manager(None)

        assert manager.backend == "memory"
        manager.close()

    def test_with_connected_cache_uses_redis(self, stub_redis):
        manager = build_otp_manager(RedisClient(client=stub_redis))

        assert manager.backend == "redis"
        manager.close()

    def test_unconfigured_cache_uses_memory(self):
        manager = build_otp_manager(RedisClient(url=None))

        assert manager.store.primary is None
        assert manager.backend == "memory"
        manager.close()
