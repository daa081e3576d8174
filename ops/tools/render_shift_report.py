#!/usr/bin/env python3
"""Render a shift-lead report payload to PDF (or HTML) without mailing it."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from config.settings import AssetSettings, MailSettings, RenderSettings
from shiftreport.common.exceptions import ShiftReportError
from shiftreport.pipeline import ShiftReportPipeline


def _build_pipeline() -> ShiftReportPipeline:
    return ShiftReportPipeline(
        mail_settings=MailSettings(),
        render_settings=RenderSettings(),
        asset_settings=AssetSettings(),
    )


async def _run(payload: dict, output: Path, html_only: bool) -> None:
    pipeline = _build_pipeline()
    _, document = pipeline.prepare(payload)
    if html_only:
        output.write_text(document.html, encoding="utf-8")
        return
    artifact = await pipeline.render(document)
    output.write_bytes(artifact.content)


def main() -> int:
    parser = argparse.ArgumentParser(description="Render a shift-lead report from a JSON payload.")
    parser.add_argument("--input", required=True, help="Path to the report JSON payload.")
    parser.add_argument("--output", required=True, help="Where to write the PDF (or HTML).")
    parser.add_argument("--html", action="store_true", help="Write the composed HTML instead of a PDF.")
    args = parser.parse_args()

    payload = json.loads(Path(args.input).read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        parser.error("payload must be a JSON object")

    try:
        asyncio.run(_run(payload, Path(args.output), args.html))
    except ShiftReportError as exc:
        print(f"{type(exc).__name__}: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
