import asyncio

import pytest

from config.settings import RenderSettings
from shiftreport.common.exceptions import EngineUnavailableError, RenderError
from shiftreport.rendering import locator
from shiftreport.rendering.locator import (
    DARWIN_CANDIDATES,
    LINUX_CANDIDATES,
    WINDOWS_CANDIDATES,
    platform_candidates,
    playwright_managed_executable,
    resolve_executable_path,
)

from tests.fakes import BrokenDriver

MANAGED_PATH = "/opt/ms-playwright/chromium/chrome"


class ManagedStub:
    def __init__(self, path=MANAGED_PATH):
        self.path = path
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        return self.path


def _resolve(settings, managed, *, platform="linux", present=()):
    return asyncio.run(
        resolve_executable_path(
            settings,
            managed_resolver=managed,
            platform=platform,
            exists=lambda path: path in present,
        )
    )


def test_override_wins_without_existence_check():
    managed = ManagedStub()
    settings = RenderSettings(CHROME_EXECUTABLE_PATH="/nowhere/chrome", SHIFTREPORT_ENV="production")

    assert _resolve(settings, managed) == "/nowhere/chrome"
    assert managed.calls == 0


def test_puppeteer_override_name_is_honored():
    settings = RenderSettings(PUPPETEER_EXECUTABLE_PATH="/custom/chromium")
    assert _resolve(settings, ManagedStub()) == "/custom/chromium"


def test_blank_override_is_ignored():
    settings = RenderSettings(CHROME_EXECUTABLE_PATH="   ")
    assert _resolve(settings, ManagedStub(), present={LINUX_CANDIDATES[0]}) == LINUX_CANDIDATES[0]


def test_production_uses_managed_engine_even_if_local_chrome_exists():
    managed = ManagedStub()
    settings = RenderSettings(SHIFTREPORT_ENV="production")

    assert _resolve(settings, managed, present=set(LINUX_CANDIDATES)) == MANAGED_PATH
    assert managed.calls == 1


def test_node_env_alias_selects_production():
    assert RenderSettings(NODE_ENV="production").is_production


def test_production_without_managed_engine_fails():
    settings = RenderSettings(SHIFTREPORT_ENV="production")
    with pytest.raises(EngineUnavailableError):
        _resolve(settings, ManagedStub(path=None))


@pytest.mark.parametrize(
    "platform, candidates",
    [("darwin", DARWIN_CANDIDATES), ("win32", WINDOWS_CANDIDATES), ("linux", LINUX_CANDIDATES)],
)
def test_first_existing_platform_candidate_is_used(platform, candidates):
    managed = ManagedStub()
    present = {candidates[1]}

    assert _resolve(RenderSettings(), managed, platform=platform, present=present) == candidates[1]
    assert managed.calls == 0


def test_candidate_order_is_respected():
    present = set(LINUX_CANDIDATES[1:])
    assert _resolve(RenderSettings(), ManagedStub(), present=present) == LINUX_CANDIDATES[1]


def test_unknown_platform_uses_linux_list():
    assert platform_candidates("freebsd13") == LINUX_CANDIDATES


def test_falls_back_to_managed_engine_outside_production():
    managed = ManagedStub()
    assert _resolve(RenderSettings(), managed, present=()) == MANAGED_PATH
    assert managed.calls == 1


def test_no_engine_anywhere_is_a_render_error():
    with pytest.raises(RenderError):
        _resolve(RenderSettings(), ManagedStub(path=None), present=())


def test_path_is_resolved_on_every_call():
    managed = ManagedStub()
    settings = RenderSettings()
    _resolve(settings, managed)
    _resolve(settings, managed)
    assert managed.calls == 2


def test_managed_resolver_returns_none_when_driver_cannot_start(monkeypatch):
    monkeypatch.setattr(locator, "async_playwright", BrokenDriver(OSError("spawn failed")).factory())
    assert asyncio.run(playwright_managed_executable()) is None
