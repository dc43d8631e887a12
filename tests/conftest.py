import os

import pytest


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    """Keep DSN_* / VMKIT_* variables of the host out of the tests."""
    for name in list(os.environ):
        if name.startswith(("DSN_", "VMKIT_", "dasein.vmproducts.")):
            monkeypatch.delenv(name, raising=False)
