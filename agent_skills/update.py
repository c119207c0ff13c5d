"""
Self-update notifier.

A best-effort check of the package index for a newer release of this CLI.
Nothing in this module may break the command the user actually ran: network,
parsing and state-file failures all degrade to "no update information".
"""

import http.client
import json
import sys
import threading
import time
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Callable, Optional

from .core import Colors, Config


USER_AGENT = "agent-skills-cli"


# =============================================================================
# Remote Lookups
# =============================================================================

def fetch_json(url: str, headers: Optional[dict] = None, timeout: float = 3.0) -> Optional[dict]:
    """
    GET a JSON document, single attempt.

    Returns:
        Parsed object, or None on network error, non-200 status or bad payload
    """
    req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT, **(headers or {})})
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            if resp.status != 200:
                return None
            payload = json.loads(resp.read().decode("utf-8"))
    except (urllib.error.URLError, http.client.HTTPException, OSError, ValueError):
        return None
    return payload if isinstance(payload, dict) else None


def fetch_latest_version(package: str, timeout: float = 3.0) -> Optional[str]:
    """Latest released version of a package on PyPI."""
    data = fetch_json(f"https://pypi.org/pypi/{package}/json", timeout=timeout)
    if not data or not isinstance(data.get("info"), dict):
        return None
    return data["info"].get("version") or None


def fetch_latest_release(repo: str, timeout: float = 3.0) -> Optional[dict]:
    """Latest GitHub release of a repo as {"tag": ..., "url": ...}."""
    data = fetch_json(
        f"https://api.github.com/repos/{repo}/releases/latest",
        headers={"Accept": "application/vnd.github.v3+json"},
        timeout=timeout,
    )
    if not data or not data.get("tag_name"):
        return None
    return {"tag": data["tag_name"], "url": data.get("html_url")}


# =============================================================================
# Update Checker
# =============================================================================

@dataclass
class UpdateReport:
    current: str
    latest: Optional[str] = None
    release: Optional[dict] = None

    @property
    def update_available(self) -> bool:
        return bool(self.latest) and self.latest != self.current


class UpdateChecker:
    """
    Rate-limited update check.

    The background variant runs at most once per interval: the timestamp is
    persisted before the lookup starts, so a failed or still-running check
    does not trigger another one.
    """

    def __init__(
        self,
        config: Config,
        clock: Callable[[], float] = time.time,
        fetch_latest: Optional[Callable[[], Optional[str]]] = None,
        fetch_release: Optional[Callable[[], Optional[dict]]] = None,
        stream=None,
    ):
        self.config = config
        self.clock = clock
        self.fetch_latest = fetch_latest or (
            lambda: fetch_latest_version(config.package_name, config.request_timeout)
        )
        self.fetch_release = fetch_release or (
            lambda: fetch_latest_release(config.github_repo, config.request_timeout)
        )
        self.stream = stream
        self._thread: Optional[threading.Thread] = None

    # -- persisted state ---------------------------------------------------

    def read_last_check(self) -> int:
        """Epoch-ms of the last check; 0 when missing or unreadable."""
        try:
            data = json.loads(self.config.update_check_file.read_text(encoding="utf-8"))
            last = int(data.get("lastCheck", 0))
        except (OSError, ValueError, TypeError, AttributeError, ArithmeticError):
            # 1e999 loads as inf
            return 0
        return last

    def write_last_check(self, now_ms: int):
        try:
            self.config.config_dir.mkdir(parents=True, exist_ok=True)
            self.config.update_check_file.write_text(
                json.dumps({"lastCheck": now_ms}), encoding="utf-8"
            )
        except OSError:
            pass

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    def is_due(self, now_ms: int) -> bool:
        interval_ms = self.config.update_check_interval * 1000
        return now_ms - self.read_last_check() >= interval_ms

    # -- background check ---------------------------------------------------

    def maybe_check_for_updates(self) -> Optional[threading.Thread]:
        """
        Start a detached lookup if the last one is older than the interval.

        Returns:
            The started thread, or None when the check was skipped or could
            not be started
        """
        try:
            now_ms = self._now_ms()
            if not self.is_due(now_ms):
                return None

            self.write_last_check(now_ms)
            thread = threading.Thread(target=self._run_background, daemon=True)
            thread.start()
        except Exception:
            return None
        self._thread = thread
        return thread

    def wait(self, timeout: Optional[float] = None):
        """Give a running background check up to `timeout` seconds to finish."""
        if self._thread is not None:
            self._thread.join(timeout)

    def _run_background(self):
        try:
            latest = self.fetch_latest()
            if latest and latest != self.config.cli_version:
                # printed late so it lands after the command's own output
                time.sleep(self.config.notice_delay)
                self.print_notice(latest)
        except Exception:
            pass

    def print_notice(self, latest: str):
        stream = self.stream or sys.stderr
        current = self.config.cli_version
        banner = f"  Update available {current} → {latest}  "
        border = "═" * len(banner)
        print(f"\n{Colors.YELLOW}{Colors.BOLD}╔{border}╗{Colors.RESET}", file=stream)
        print(f"{Colors.YELLOW}{Colors.BOLD}║{banner}║{Colors.RESET}", file=stream)
        print(f"{Colors.YELLOW}{Colors.BOLD}╚{border}╝{Colors.RESET}", file=stream)
        print(
            f"Run {Colors.CYAN}pip install -U {self.config.package_name}{Colors.RESET} to update.\n",
            file=stream,
        )

    # -- foreground check ---------------------------------------------------

    def check_now(self) -> UpdateReport:
        """Both lookups, synchronously and without rate limiting."""
        report = UpdateReport(current=self.config.cli_version)
        try:
            report.latest = self.fetch_latest()
        except Exception:
            report.latest = None
        try:
            report.release = self.fetch_release()
        except Exception:
            report.release = None
        return report
