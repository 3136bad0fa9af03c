import io
import logging

import pytest
from rich.console import Console

from douyin_import.types import AuthToken


class FakeAuthTransport:
    def __init__(self, statuses, key="key-1", create_error=None, generate_error=None):
        self.statuses = list(statuses)
        self.key = key
        self.create_error = create_error
        self.generate_error = generate_error
        self.checks = 0
        self.finalized = False

    def create_key(self):
        if self.create_error:
            raise self.create_error
        return AuthToken(key=self.key)

    def generate_code(self, token):
        if self.generate_error:
            raise self.generate_error
        return f"<qr {token.key}>"

    def check_status(self, token):
        self.checks += 1
        s = self.statuses.pop(0)
        if isinstance(s, Exception):
            raise s
        return s

    def finalize(self, token):
        self.finalized = True


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=200)


@pytest.fixture
def logger():
    return logging.getLogger("douyin_import.tests")


@pytest.fixture
def fake_auth():
    return FakeAuthTransport
