"""
Browser cookie loading for paywalled sources.

Cookies are optional: every failure here is logged and results in an
empty jar, so fetching proceeds unauthenticated.

Supported sources:
1. An explicit Netscape ``cookies.txt`` file
2. An explicit Firefox ``cookies.sqlite`` or Chrome/Chromium ``Cookies`` database
3. Auto-discovery: Chrome, then Chromium, then the most recent Firefox profile

Only cookies stored with a plaintext value are read from Chrome; values
Chrome keeps encrypted are skipped.
"""

from __future__ import annotations

from http.cookiejar import LoadError, MozillaCookieJar
import logging
from pathlib import Path
import shutil
import sqlite3
import tempfile
import time

import httpx

from ..utils.logging import log_event

logger = logging.getLogger("podcast_briefing")

CHROME_PROFILE_DIRS = (".config/google-chrome/Default", ".config/chromium/Default")

# Seconds between 1601-01-01 (Chrome's epoch) and 1970-01-01
_CHROME_EPOCH_OFFSET = 11_644_473_600


def load_browser_cookies(
    cookie_file: str | None = None, discover: bool = True, home: Path | None = None
) -> httpx.Cookies:
    """Load cookies from a file or the local browser profiles.

    Args:
        cookie_file: Path to a cookies.txt file or a browser cookie database
        discover: Whether to search Chrome, Chromium and Firefox profiles
            when no file is given
        home: Home directory to search instead of the user's

    Returns:
        An httpx.Cookies jar, empty when nothing could be loaded
    """
    if cookie_file:
        path = Path(cookie_file).expanduser()
        if path.exists():
            cookies = _load_path(path)
            if cookies is not None:
                return cookies
    elif discover:
        for path in find_browser_cookie_stores(home):
            cookies = _load_path(path)
            if cookies is not None and len(cookies.jar) > 0:
                return cookies

    log_event(logger, "No browser cookies loaded", event="cookies_missing")
    return httpx.Cookies()


def find_browser_cookie_stores(home: Path | None = None) -> list[Path]:
    """Existing cookie databases in lookup order."""
    base = home or Path.home()
    stores = [base / profile / "Cookies" for profile in CHROME_PROFILE_DIRS]
    firefox = find_firefox_cookies(base)
    if firefox is not None:
        stores.append(firefox)
    return [p for p in stores if p.exists()]


def find_firefox_cookies(home: Path | None = None) -> Path | None:
    """Return the most recently used Firefox cookies.sqlite, if any."""
    firefox_dir = (home or Path.home()) / ".mozilla" / "firefox"
    if not firefox_dir.exists():
        return None
    candidates = sorted(
        firefox_dir.glob("*/cookies.sqlite"),
        key=lambda p: p.stat().st_mtime,
        reverse=True,
    )
    return candidates[0] if candidates else None


def _load_path(path: Path) -> httpx.Cookies | None:
    try:
        if path.suffix == ".sqlite":
            cookies = _load_firefox_db(path)
        elif path.name == "Cookies":
            cookies = _load_chrome_db(path)
        else:
            cookies = _load_netscape_file(path)
    except (OSError, sqlite3.Error, LoadError) as exc:
        log_event(
            logger,
            "Could not load cookies",
            level=logging.WARNING,
            event="cookies_error",
            path=str(path),
            error=str(exc),
        )
        return None

    log_event(logger, "Loaded browser cookies", event="cookies_loaded", path=str(path), count=len(cookies.jar))
    return cookies


def _load_netscape_file(path: Path) -> httpx.Cookies:
    jar = MozillaCookieJar(str(path))
    jar.load(ignore_discard=True, ignore_expires=False)
    return httpx.Cookies(jar)


def _load_firefox_db(path: Path) -> httpx.Cookies:
    rows = _query_copy(
        path,
        "SELECT host, path, name, value FROM moz_cookies "
        "WHERE expiry > ? AND name != '' AND value != ''",
        int(time.time()),
    )
    return _to_cookies(rows)


def _load_chrome_db(path: Path) -> httpx.Cookies:
    rows = _query_copy(
        path,
        "SELECT host_key, path, name, value FROM cookies "
        "WHERE expires_utc > ? AND name != '' AND value != ''",
        (int(time.time()) + _CHROME_EPOCH_OFFSET) * 1_000_000,
    )
    return _to_cookies(rows)


def _query_copy(path: Path, query: str, now: int) -> list[tuple[str, str, str, str]]:
    # Browsers keep the database locked while running; read a copy
    with tempfile.TemporaryDirectory() as tmpdir:
        copy_path = Path(tmpdir) / path.name
        shutil.copyfile(path, copy_path)
        conn = sqlite3.connect(str(copy_path))
        try:
            return conn.execute(query, (now,)).fetchall()
        finally:
            conn.close()


def _to_cookies(rows: list[tuple[str, str, str, str]]) -> httpx.Cookies:
    cookies = httpx.Cookies()
    for host, cookie_path, name, value in rows:
        cookies.set(name, value, domain=host, path=cookie_path or "/")
    return cookies
