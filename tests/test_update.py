"""
Tests for the update checker.

Network access and the clock are replaced with mocks.
"""

import io
import json
import tempfile
import urllib.error
from pathlib import Path
from unittest import mock

from agent_skills import Config, UpdateChecker
from agent_skills.update import fetch_json, fetch_latest_release, fetch_latest_version


DAY = 24 * 60 * 60


def make_checker(tmp, now=1_700_000_000.0, latest="1.0.0", stream=None):
    config = Config(config_dir=Path(tmp) / "state", notice_delay=0, cli_version="1.0.0")
    clock = mock.Mock(return_value=now)
    fetch = mock.Mock(return_value=latest)
    checker = UpdateChecker(config, clock=clock, fetch_latest=fetch, fetch_release=mock.Mock(), stream=stream)
    return checker, clock, fetch


class FakeResponse(io.BytesIO):
    def __init__(self, payload: bytes, status: int = 200):
        super().__init__(payload)
        self.status = status


class TestRateLimit:
    """At most one background lookup per 24 hours."""

    def test_second_call_within_window_skips_network(self):
        with tempfile.TemporaryDirectory() as tmp:
            checker, clock, fetch = make_checker(tmp)

            first = checker.maybe_check_for_updates()
            first.join(5)
            state = json.loads(checker.config.update_check_file.read_text())

            clock.return_value += DAY - 1
            second = checker.maybe_check_for_updates()

            assert state == {"lastCheck": 1_700_000_000_000}
            assert second is None
            assert fetch.call_count == 1

    def test_check_again_after_interval(self):
        with tempfile.TemporaryDirectory() as tmp:
            checker, clock, fetch = make_checker(tmp)

            checker.maybe_check_for_updates().join(5)
            clock.return_value += DAY
            checker.maybe_check_for_updates().join(5)

            assert fetch.call_count == 2

    def test_timestamp_written_before_lookup(self):
        """A lookup that fails still counts as this window's check."""
        with tempfile.TemporaryDirectory() as tmp:
            checker, _, fetch = make_checker(tmp)
            fetch.side_effect = RuntimeError("boom")

            checker.maybe_check_for_updates().join(5)

            assert checker.config.update_check_file.exists()
            assert checker.maybe_check_for_updates() is None

    def test_corrupt_state_means_check_now(self):
        with tempfile.TemporaryDirectory() as tmp:
            checker, _, fetch = make_checker(tmp)
            checker.config.config_dir.mkdir(parents=True)
            checker.config.update_check_file.write_text("{not json")

            assert checker.read_last_check() == 0
            checker.maybe_check_for_updates().join(5)

            assert fetch.call_count == 1

    def test_wrong_shape_state_means_check_now(self):
        with tempfile.TemporaryDirectory() as tmp:
            checker, _, _ = make_checker(tmp)
            checker.config.config_dir.mkdir(parents=True)

            for content in ("[]", '{"lastCheck": "soon"}', "null"):
                checker.config.update_check_file.write_text(content)
                assert checker.read_last_check() == 0

    def test_out_of_range_timestamp_means_check_now(self):
        with tempfile.TemporaryDirectory() as tmp:
            checker, _, fetch = make_checker(tmp)
            checker.config.config_dir.mkdir(parents=True)
            checker.config.update_check_file.write_text('{"lastCheck": 1e999}')

            assert checker.read_last_check() == 0
            checker.maybe_check_for_updates().join(5)

            assert fetch.call_count == 1
            state = json.loads(checker.config.update_check_file.read_text())
            assert state == {"lastCheck": 1_700_000_000_000}

    def test_thread_start_failure_is_ignored(self):
        with tempfile.TemporaryDirectory() as tmp:
            checker, _, fetch = make_checker(tmp)

            with mock.patch("threading.Thread.start", side_effect=RuntimeError("can't start new thread")):
                assert checker.maybe_check_for_updates() is None

            checker.wait(1)
            assert fetch.call_count == 0

    def test_unwritable_state_is_ignored(self):
        with tempfile.TemporaryDirectory() as tmp:
            checker, _, fetch = make_checker(tmp)
            # a file where the state directory should be
            checker.config.config_dir.parent.mkdir(parents=True, exist_ok=True)
            checker.config.config_dir.write_text("blocker")

            thread = checker.maybe_check_for_updates()
            thread.join(5)

            assert fetch.call_count == 1


class TestNotice:
    def test_notice_printed_for_newer_version(self):
        with tempfile.TemporaryDirectory() as tmp:
            stream = io.StringIO()
            checker, _, _ = make_checker(tmp, latest="1.1.0", stream=stream)

            checker.maybe_check_for_updates()
            checker.wait(5)

            assert "1.0.0 → 1.1.0" in stream.getvalue()
            assert "pip install -U agent-skills-cli" in stream.getvalue()

    def test_no_notice_when_current(self):
        with tempfile.TemporaryDirectory() as tmp:
            stream = io.StringIO()
            checker, _, _ = make_checker(tmp, latest="1.0.0", stream=stream)

            checker.maybe_check_for_updates()
            checker.wait(5)

            assert stream.getvalue() == ""

    def test_no_notice_when_lookup_fails(self):
        with tempfile.TemporaryDirectory() as tmp:
            stream = io.StringIO()
            checker, _, _ = make_checker(tmp, latest=None, stream=stream)

            checker.maybe_check_for_updates()
            checker.wait(5)

            assert stream.getvalue() == ""


class TestCheckNow:
    def test_not_rate_limited(self):
        with tempfile.TemporaryDirectory() as tmp:
            checker, _, fetch = make_checker(tmp, latest="2.0.0")

            checker.check_now()
            report = checker.check_now()

            assert fetch.call_count == 2
            assert report.update_available
            assert not checker.config.update_check_file.exists()

    def test_lookup_errors_swallowed(self):
        with tempfile.TemporaryDirectory() as tmp:
            checker, _, fetch = make_checker(tmp)
            fetch.side_effect = OSError("offline")
            checker.fetch_release.side_effect = ValueError("bad json")

            report = checker.check_now()

            assert report.latest is None
            assert report.release is None
            assert not report.update_available


class TestFetch:
    """Remote lookups resolve to None on any failure."""

    def test_latest_version_from_pypi(self):
        body = json.dumps({"info": {"version": "1.4.0"}}).encode()
        with mock.patch("urllib.request.urlopen", return_value=FakeResponse(body)) as urlopen:
            assert fetch_latest_version("agent-skills-cli") == "1.4.0"

        request = urlopen.call_args[0][0]
        assert request.full_url == "https://pypi.org/pypi/agent-skills-cli/json"

    def test_latest_release_from_github(self):
        body = json.dumps({"tag_name": "v1.4.0", "html_url": "https://github.com/o/r/releases/v1.4.0"}).encode()
        with mock.patch("urllib.request.urlopen", return_value=FakeResponse(body)) as urlopen:
            release = fetch_latest_release("o/r")

        assert release == {"tag": "v1.4.0", "url": "https://github.com/o/r/releases/v1.4.0"}
        request = urlopen.call_args[0][0]
        assert request.full_url == "https://api.github.com/repos/o/r/releases/latest"

    def test_network_error(self):
        with mock.patch("urllib.request.urlopen", side_effect=urllib.error.URLError("no route")):
            assert fetch_json("https://example.invalid") is None

    def test_timeout(self):
        with mock.patch("urllib.request.urlopen", side_effect=TimeoutError()):
            assert fetch_latest_version("agent-skills-cli") is None

    def test_http_error(self):
        error = urllib.error.HTTPError("https://example.invalid", 404, "Not Found", {}, None)
        with mock.patch("urllib.request.urlopen", side_effect=error):
            assert fetch_latest_release("o/r") is None

    def test_non_200_status(self):
        with mock.patch("urllib.request.urlopen", return_value=FakeResponse(b"{}", status=204)):
            assert fetch_json("https://example.invalid") is None

    def test_malformed_payload(self):
        with mock.patch("urllib.request.urlopen", return_value=FakeResponse(b"<html>")):
            assert fetch_latest_version("agent-skills-cli") is None

    def test_unexpected_shape(self):
        with mock.patch("urllib.request.urlopen", return_value=FakeResponse(b'["1.0"]')):
            assert fetch_latest_version("agent-skills-cli") is None
        with mock.patch("urllib.request.urlopen", return_value=FakeResponse(b'{"info": "x"}')):
            assert fetch_latest_version("agent-skills-cli") is None
