"""In-memory stand-ins for Playwright and smtplib used across the test suite."""

from __future__ import annotations

import asyncio


class FakePage:
    def __init__(self, *, load_error=None, pdf_bytes=b"%PDF-1.7 fake", pdf_delay_s=0.0):
        self.load_error = load_error
        self.pdf_bytes = pdf_bytes
        self.pdf_delay_s = pdf_delay_s
        self.closed = False
        self.html = None
        self.set_content_kwargs = None
        self.pdf_kwargs = None

    async def set_content(self, html, **kwargs):
        self.html = html
        self.set_content_kwargs = kwargs
        if self.load_error is not None:
            raise self.load_error

    async def pdf(self, **kwargs):
        self.pdf_kwargs = kwargs
        if self.pdf_delay_s:
            await asyncio.sleep(self.pdf_delay_s)
        return self.pdf_bytes

    async def close(self):
        self.closed = True


class FakeBrowser:
    def __init__(self, page):
        self.page = page
        self.closed = False
        self.new_page_kwargs = None

    async def new_page(self, **kwargs):
        self.new_page_kwargs = kwargs
        return self.page

    async def close(self):
        self.closed = True


class FakeChromium:
    def __init__(self, browser, launch_error=None):
        self.browser = browser
        self.launch_error = launch_error
        self.launch_kwargs = None

    async def launch(self, **kwargs):
        self.launch_kwargs = kwargs
        if self.launch_error is not None:
            raise self.launch_error
        return self.browser


class FakePlaywright:
    """Async context manager shaped like ``async_playwright()``."""

    def __init__(self, page=None, launch_error=None):
        self.page = page or FakePage()
        self.browser = FakeBrowser(self.page)
        self.chromium = FakeChromium(self.browser, launch_error=launch_error)
        self.stopped = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        self.stopped = True
        return False

    def factory(self):
        return lambda: self


class FakeSMTP:
    def __init__(self, *, supports_starttls=True, send_error=None, login_error=None, refused=None):
        self.supports_starttls = supports_starttls
        self.send_error = send_error
        self.login_error = login_error
        self.refused = refused or {}
        self.calls = []
        self.sent = []

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.calls.append("quit")
        return False

    def ehlo(self):
        self.calls.append("ehlo")

    def has_extn(self, name):
        return self.supports_starttls and name.lower() == "starttls"

    def starttls(self, context=None):
        self.calls.append("starttls")

    def login(self, user, password):
        self.calls.append(("login", user))
        if self.login_error is not None:
            raise self.login_error

    def send_message(self, message):
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(message)
        return dict(self.refused)

    def factory(self):
        return lambda settings: self


class BrokenDriver:
    """``async_playwright()`` stand-in whose driver process fails to start."""

    def __init__(self, error=None):
        self.error = error or FileNotFoundError("playwright driver not found")

    async def __aenter__(self):
        raise self.error

    async def __aexit__(self, *exc_info):
        return False

    def factory(self):
        return lambda: self
