import os

import pytest

from varnishlog.channel import LineChannel
from varnishlog.sources import start_file_feeder

TESTDATA = os.path.join(os.path.dirname(__file__), "testdata")


def testdata_path(name: str) -> str:
    return os.path.join(TESTDATA, name)


@pytest.fixture
def open_log():
    """Return a factory that feeds a testdata log into a fresh channel."""
    threads = []

    def _open(name: str) -> LineChannel:
        channel = LineChannel()
        threads.append(start_file_feeder(testdata_path(name), channel))
        return channel

    yield _open

    for t in threads:
        t.join(timeout=5)
