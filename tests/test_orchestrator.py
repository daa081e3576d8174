import asyncio

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from config.settings import RenderSettings
from shiftreport.common.exceptions import RenderError
from shiftreport.rendering.orchestrator import (
    PDF_CONTENT_TYPE,
    PDF_FILENAME,
    PRODUCTION_LAUNCH_ARGS,
    PdfRenderer,
)
from shiftreport.reporting.types import ComposedDocument

from tests.fakes import BrokenDriver, FakePage, FakePlaywright

EXECUTABLE = "/usr/bin/chromium"
DOCUMENT = ComposedDocument(html="<!DOCTYPE html><p>hola</p>")


def _render(renderer):
    return asyncio.run(renderer.render(DOCUMENT, EXECUTABLE))


def test_successful_render_prints_a4_pdf():
    pw = FakePlaywright()
    renderer = PdfRenderer(RenderSettings(), playwright_factory=pw.factory())

    artifact = _render(renderer)

    assert artifact.content == b"%PDF-1.7 fake"
    assert artifact.content_type == PDF_CONTENT_TYPE
    assert artifact.filename == PDF_FILENAME
    assert artifact.size == len(b"%PDF-1.7 fake")

    assert pw.chromium.launch_kwargs["executable_path"] == EXECUTABLE
    assert pw.chromium.launch_kwargs["headless"] is True
    assert pw.browser.new_page_kwargs == {
        "viewport": {"width": 794, "height": 1123},
        "device_scale_factor": 2,
    }
    assert pw.page.html == DOCUMENT.html
    assert pw.page.set_content_kwargs == {"wait_until": "load", "timeout": 30000}
    assert pw.page.pdf_kwargs == {
        "format": "A4",
        "print_background": True,
        "margin": {"top": "20mm", "right": "20mm", "bottom": "20mm", "left": "20mm"},
    }
    assert pw.page.closed
    assert pw.browser.closed
    assert pw.stopped


def test_development_launch_keeps_sandbox():
    renderer = PdfRenderer(RenderSettings())
    args = renderer.launch_options(EXECUTABLE)["args"]
    assert "--no-sandbox" not in args


def test_production_launch_adds_container_flags():
    renderer = PdfRenderer(RenderSettings(SHIFTREPORT_ENV="production"))
    args = renderer.launch_options(EXECUTABLE)["args"]
    for flag in PRODUCTION_LAUNCH_ARGS:
        assert flag in args


def test_load_timeout_is_a_render_error_and_closes_everything():
    pw = FakePlaywright(page=FakePage(load_error=PlaywrightTimeoutError("Timeout 30000ms exceeded")))
    renderer = PdfRenderer(RenderSettings(), playwright_factory=pw.factory())

    with pytest.raises(RenderError, match="did not load"):
        _render(renderer)

    assert pw.page.pdf_kwargs is None
    assert pw.page.closed
    assert pw.browser.closed
    assert pw.stopped


def test_engine_error_during_load_is_a_render_error():
    pw = FakePlaywright(page=FakePage(load_error=PlaywrightError("Target closed")))
    renderer = PdfRenderer(RenderSettings(), playwright_factory=pw.factory())

    with pytest.raises(RenderError, match="Target closed"):
        _render(renderer)

    assert pw.page.closed
    assert pw.browser.closed


def test_launch_failure_is_a_render_error():
    pw = FakePlaywright(launch_error=PlaywrightError("Executable doesn't exist"))
    renderer = PdfRenderer(RenderSettings(), playwright_factory=pw.factory())

    with pytest.raises(RenderError):
        _render(renderer)

    assert pw.browser.new_page_kwargs is None
    assert pw.stopped


def test_overall_deadline_cancels_and_closes_everything():
    pw = FakePlaywright(page=FakePage(pdf_delay_s=5))
    settings = RenderSettings(SHIFTREPORT_RENDER_TIMEOUT_S=0.05)
    renderer = PdfRenderer(settings, playwright_factory=pw.factory())

    with pytest.raises(RenderError, match="deadline"):
        _render(renderer)

    assert pw.page.closed
    assert pw.browser.closed
    assert pw.stopped


def test_custom_load_timeout_is_passed_in_milliseconds():
    pw = FakePlaywright()
    settings = RenderSettings(SHIFTREPORT_RENDER_LOAD_TIMEOUT_S=5)
    _render(PdfRenderer(settings, playwright_factory=pw.factory()))
    assert pw.page.set_content_kwargs["timeout"] == 5000


def test_driver_start_failure_is_a_render_error():
    renderer = PdfRenderer(RenderSettings(), playwright_factory=BrokenDriver().factory())

    with pytest.raises(RenderError, match="FileNotFoundError") as excinfo:
        _render(renderer)

    assert isinstance(excinfo.value.__cause__, FileNotFoundError)
