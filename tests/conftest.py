# SPDX-License-Identifier: LGPL-3.0-or-later
import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

_THIS_DIR = Path(__file__).resolve().parent
_REPO_ROOT = _THIS_DIR.parent

if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

os.environ.setdefault("PYTHONPATH", str(_REPO_ROOT))

from fakes.fake_winreg import FakeWinreg  # noqa: E402

from remotereg.registry.transport import WinregTransport  # noqa: E402

LOCAL_NAME = "LOCALBOX"


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests with no platform access")
    config.addinivalue_line("markers", "security: secret handling")


@pytest.fixture
def fake_winreg():
    api = FakeWinreg(local_name=LOCAL_NAME)
    api.add_host(LOCAL_NAME)
    return api


@pytest.fixture
def transport(fake_winreg):
    with patch("remotereg.registry.transport.socket.gethostname", return_value=LOCAL_NAME):
        yield WinregTransport(api=fake_winreg)
