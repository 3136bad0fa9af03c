import pytest

from douyin_import.auth import AuthSession
from douyin_import.errors import AuthInitError, AuthRetriesExhausted, QRExpired
from douyin_import.types import AuthState, AuthStatus, AuthToken


def make_session(transport, console, logger, **kwargs):
    sleeps = []
    session = AuthSession(transport, console, logger, sleep=sleeps.append, **kwargs)
    return session, sleeps


def test_status_codes_map_to_statuses():
    assert AuthStatus.from_code(800) is AuthStatus.EXPIRED
    assert AuthStatus.from_code(801) is AuthStatus.WAITING
    assert AuthStatus.from_code(802) is AuthStatus.SCANNED
    assert AuthStatus.from_code(803) is AuthStatus.SUCCESS
    assert AuthStatus.from_code(500) is AuthStatus.TRANSIENT_ERROR


def test_waiting_then_success(fake_auth, console, logger):
    transport = fake_auth([801, 801, 801, 803])
    session, sleeps = make_session(transport, console, logger)

    token = session.login()

    assert token == AuthToken(key="key-1")
    assert session.transitions == [AuthState.WAITING, AuthState.WAITING, AuthState.WAITING, AuthState.SUCCESS]
    assert session.state is AuthState.SUCCESS
    assert transport.finalized
    assert sleeps == [2.0, 2.0, 2.0, 2.0]
    assert "<qr key-1>" in console.file.getvalue()


def test_scanned_is_informational(fake_auth, console, logger):
    transport = fake_auth([801, 802, 802, 803])
    session, _ = make_session(transport, console, logger)
    session.login()
    assert session.transitions == [AuthState.WAITING, AuthState.SCANNED, AuthState.SCANNED, AuthState.SUCCESS]
    assert console.file.getvalue().count("Scanned!") == 1


def test_expired_raises(fake_auth, console, logger):
    transport = fake_auth([801, 802, 800])
    session, _ = make_session(transport, console, logger)
    with pytest.raises(QRExpired):
        session.login()
    assert session.state is AuthState.EXPIRED
    assert not transport.finalized


def test_transient_errors_leave_state_unchanged(fake_auth, console, logger):
    transport = fake_auth([801, ConnectionError("boom"), 999, 802, ConnectionError("boom"), 803])
    session, sleeps = make_session(transport, console, logger)
    session.login()
    assert session.transitions == [AuthState.WAITING, AuthState.SCANNED, AuthState.SUCCESS]
    assert transport.checks == 6
    assert len(sleeps) == 6


def test_max_retries_stops_polling(fake_auth, console, logger):
    transport = fake_auth([ConnectionError("down")] * 10)
    session, _ = make_session(transport, console, logger, max_retries=3)
    with pytest.raises(AuthRetriesExhausted):
        session.login()
    assert transport.checks == 3
    assert session.state is AuthState.WAITING


def test_retry_budget_resets_after_good_poll(fake_auth, console, logger):
    err = ConnectionError("flaky")
    transport = fake_auth([err, err, 801, err, err, 803])
    session, _ = make_session(transport, console, logger, max_retries=3)
    session.login()
    assert session.state is AuthState.SUCCESS


def test_create_key_failure_is_fatal(fake_auth, console, logger):
    transport = fake_auth([], create_error=RuntimeError("network"))
    session, sleeps = make_session(transport, console, logger)
    with pytest.raises(AuthInitError):
        session.login()
    assert session.state is AuthState.INIT
    assert sleeps == []


def test_generate_code_failure_is_fatal(fake_auth, console, logger):
    transport = fake_auth([], generate_error=RuntimeError("render"))
    session, _ = make_session(transport, console, logger)
    with pytest.raises(AuthInitError):
        session.login()
    assert session.state is AuthState.KEY_CREATED


def test_ensure_authenticated_logs_in_once(fake_auth, console, logger):
    transport = fake_auth([803])
    session, _ = make_session(transport, console, logger)
    first = session.ensure_authenticated()
    second = session.ensure_authenticated()
    assert first is second
    assert transport.checks == 1


def test_account_info_failure_keeps_login(fake_auth, console, logger):
    transport = fake_auth([801, 803])

    def broken_finalize(token):
        raise ConnectionError("account info fetch failed")

    transport.finalize = broken_finalize
    session, _ = make_session(transport, console, logger)
    token = session.login()
    assert token == AuthToken(key="key-1")
    assert session.state is AuthState.SUCCESS
    assert "Login successful!" in console.file.getvalue()
