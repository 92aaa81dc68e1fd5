import threading
from datetime import timedelta

from coaching.services.otp import OtpLedger, generate_code


def test_generated_codes_are_six_digits():
    for _ in range(200):
        code = generate_code()
        assert len(code) == 6
        assert code.isdigit()


def test_verify_is_single_use(ledger):
    code = ledger.issue("user@test.com")

    assert ledger.verify("user@test.com", code) is True
    assert ledger.verify("user@test.com", code) is False
    assert "user@test.com" not in ledger


def test_wrong_code_leaves_entry_live(ledger):
    code = ledger.issue("user@test.com")
    wrong = "000000" if code != "000000" else "111111"

    assert ledger.verify("user@test.com", wrong) is False
    assert "user@test.com" in ledger
    assert ledger.verify("user@test.com", code) is True


def test_comparison_is_exact(ledger):
    code = ledger.issue("user@test.com")

    assert ledger.verify("user@test.com", f" {code}") is False
    assert ledger.verify("user@test.com", code) is True


def test_reissue_invalidates_previous_code(ledger):
    first = ledger.issue("+919876543210")
    second = ledger.issue("+919876543210")
    while second == first:
        second = ledger.issue("+919876543210")

    assert ledger.verify("+919876543210", first) is False
    assert ledger.verify("+919876543210", second) is True


def test_codes_are_keyed_per_identifier(ledger):
    a = ledger.issue("a@test.com")
    ledger.issue("b@test.com")

    assert ledger.verify("b@test.com", ledger.issued["b@test.com"]) is True
    assert ledger.verify("a@test.com", a) is True


def test_code_expires_after_window(ledger, clock):
    code = ledger.issue("user@test.com")
    clock.advance(minutes=5)

    assert ledger.verify("user@test.com", code) is False
    assert len(ledger) == 0


def test_code_valid_just_before_expiry(ledger, clock):
    code = ledger.issue("user@test.com")
    clock.advance(minutes=4, seconds=59)

    assert ledger.verify("user@test.com", code) is True


def test_unknown_identifier_fails(ledger):
    assert ledger.verify("nobody@test.com", "123456") is False


def test_purge_expired(ledger, clock):
    ledger.issue("a@test.com")
    clock.advance(minutes=3)
    ledger.issue("b@test.com")
    clock.advance(minutes=3)

    assert ledger.purge_expired() == 1
    assert "a@test.com" not in ledger
    assert "b@test.com" in ledger


def test_concurrent_verifies_succeed_once():
    ledger = OtpLedger(ttl=timedelta(minutes=5))
    code = ledger.issue("race@test.com")
    results = []
    barrier = threading.Barrier(16)

    def attempt():
        barrier.wait()
        results.append(ledger.verify("race@test.com", code))

    threads = [threading.Thread(target=attempt) for _ in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 1
    assert results.count(False) == 15
