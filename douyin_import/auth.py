from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional, Protocol

from rich.console import Console

from .errors import AuthInitError, AuthRetriesExhausted, QRExpired
from .types import AuthState, AuthStatus, AuthToken

DEFAULT_POLL_INTERVAL = 2.0


class AuthTransport(Protocol):
    def create_key(self) -> AuthToken: ...

    def generate_code(self, token: AuthToken) -> str: ...

    def check_status(self, token: AuthToken) -> int: ...

    def finalize(self, token: AuthToken) -> None: ...


class AuthSession:
    """QR-code login against NetEase, driven by polling.

    INIT -> KEY_CREATED -> CODE_GENERATED -> WAITING <-> SCANNED -> SUCCESS | EXPIRED

    A failed status call is a transient event: the state is left as is and
    the poll repeats after ``poll_interval``. ``max_retries=None`` polls
    through transient errors forever; an int N gives up after N consecutive
    errors.
    """

    def __init__(
        self,
        transport: AuthTransport,
        console: Console,
        logger: logging.Logger,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_retries: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.transport = transport
        self.console = console
        self.logger = logger
        self.poll_interval = poll_interval
        self.max_retries = max_retries
        self._sleep = sleep
        self.state = AuthState.INIT
        self.token: Optional[AuthToken] = None
        self.transitions: List[AuthState] = []

    @property
    def authenticated(self) -> bool:
        return self.state is AuthState.SUCCESS

    def ensure_authenticated(self) -> AuthToken:
        if self.authenticated and self.token is not None:
            return self.token
        return self.login()

    def login(self) -> AuthToken:
        self.state = AuthState.INIT
        self.transitions = []

        try:
            token = self.transport.create_key()
        except Exception as e:
            raise AuthInitError(f"create key failed: {e}") from e
        self.token = token
        self.state = AuthState.KEY_CREATED

        try:
            code = self.transport.generate_code(token)
        except Exception as e:
            raise AuthInitError(f"generate qr failed: {e}") from e
        self.state = AuthState.CODE_GENERATED
        self.console.print("Please scan the QR code with the NetEase Cloud Music app:")
        self.console.print(code, markup=False, highlight=False)

        self.state = AuthState.WAITING
        self.console.print("Waiting for scan...")
        self._poll(token)
        return token

    def _poll(self, token: AuthToken) -> None:
        errors = 0
        while True:
            self._sleep(self.poll_interval)
            try:
                code = self.transport.check_status(token)
            except Exception as e:
                errors += 1
                self.logger.warning(f"Check error: {e}")
                self._check_retry_budget(errors)
                continue

            status = AuthStatus.from_code(code)
            if status is AuthStatus.TRANSIENT_ERROR:
                errors += 1
                self.logger.warning(f"Unexpected QR status code {code}")
                self._check_retry_budget(errors)
                continue
            errors = 0

            if status is AuthStatus.EXPIRED:
                self._move(AuthState.EXPIRED)
                raise QRExpired("qr code expired")
            if status is AuthStatus.SUCCESS:
                self._move(AuthState.SUCCESS)
                try:
                    self.transport.finalize(token)
                except Exception as e:
                    self.logger.warning(f"Logged in, but fetching account info failed: {e}")
                self.console.print("[green]Login successful![/green]")
                return
            if status is AuthStatus.SCANNED:
                if self.state is not AuthState.SCANNED:
                    self.console.print("Scanned! waiting for confirmation...")
                self._move(AuthState.SCANNED)
            else:
                self._move(AuthState.WAITING)

    def _move(self, state: AuthState) -> None:
        if state is not self.state:
            self.logger.debug(f"Auth state {self.state.value} -> {state.value}")
        self.state = state
        self.transitions.append(state)

    def _check_retry_budget(self, errors: int) -> None:
        if self.max_retries is not None and errors >= self.max_retries:
            raise AuthRetriesExhausted(f"gave up after {errors} failed status checks")
