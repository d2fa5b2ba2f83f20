from __future__ import annotations

"""
Unit tests for the resident-memory probe.
"""

from unittest.mock import mock_open, patch

from depmap4ai.infra import process
from depmap4ai.infra.process import _read_proc_status_rss, get_resident_memory_bytes

_STATUS = "Name:\tpython\nVmPeak:\t  900 kB\nVmRSS:\t  2048 kB\n"


def test_proc_status_parsed_in_bytes():
    with patch("depmap4ai.infra.process.os.path.exists", return_value=True):
        with patch("builtins.open", mock_open(read_data=_STATUS)):
            assert _read_proc_status_rss() == 2048 * 1024


def test_proc_status_missing():
    with patch("depmap4ai.infra.process.os.path.exists", return_value=False):
        assert _read_proc_status_rss() is None


def test_probe_prefers_procfs():
    with patch.object(process, "_read_proc_status_rss", return_value=123):
        assert get_resident_memory_bytes() == 123


def test_probe_unavailable_on_windows():
    with patch.object(process, "_read_proc_status_rss", return_value=None):
        with patch("depmap4ai.infra.process.os.name", "nt"):
            assert get_resident_memory_bytes() is None


def test_probe_returns_positive_value_on_this_host():
    value = get_resident_memory_bytes()
    assert value is None or value > 0
