#!/usr/bin/env python3
"""Dump the view state carrierview builds for a page load.

Runs the startup sequence (shared link, saved snapshot, CSV) and prints
the record summary and the monthly out-of-service chart series.

Usage
-----
Configure through ``CARRIERVIEW_*`` environment variables or flags::

    export CARRIERVIEW_CSV_SOURCE="https://example.org/data.csv"
    python scripts/dump_view.py

Options::

    --csv SOURCE        CSV URL or path (overrides CARRIERVIEW_CSV_SOURCE)
    --page-url URL      Address the page was opened with (may carry a share link)
    --storage FILE      JSON file backing saved snapshots
    --chronological     Sort chart labels by month instead of first appearance
    --pivot-rows F,F    Print a count pivot with these row fields
    --pivot-cols F,F    ... and these column fields
    --save              Save the resulting snapshot
    --share             Print a share link for the resulting state
    --json              Output machine-readable JSON
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from carrierview import CarrierViewer, CarrierViewError, LabelOrder, PivotTable, ViewerConfig  # noqa: E402

# ── helpers ──────────────────────────────────────────────────


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def _split_fields(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def _format_pivot(table: PivotTable, out: list[str]) -> None:
    out.append(_section(f"PIVOT  rows={list(table.rows)} cols={list(table.cols)}"))
    for row_key in table.row_keys:
        cells = ", ".join(f"{'/'.join(col_key) or '*'}={table.count(row_key, col_key)}" for col_key in table.col_keys)
        out.append(f"  {'/'.join(row_key) or '*'}: {cells}  (total {table.row_total(row_key)})")
    out.append(f"  grand total: {table.grand_total}")


# ── main ─────────────────────────────────────────────────────


async def main() -> int:
    parser = argparse.ArgumentParser(description="Dump the carrierview state for a page load.")
    parser.add_argument("--csv", dest="csv_source", help="CSV URL or path")
    parser.add_argument("--page-url", help="Address the page was opened with")
    parser.add_argument("--storage", help="JSON file backing saved snapshots")
    parser.add_argument("--chronological", action="store_true", help="Sort chart labels by month")
    parser.add_argument("--pivot-rows", help="Comma-separated pivot row fields")
    parser.add_argument("--pivot-cols", help="Comma-separated pivot column fields")
    parser.add_argument("--save", action="store_true", help="Save the resulting snapshot")
    parser.add_argument("--share", action="store_true", help="Print a share link")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    overrides: dict[str, Any] = {}
    if args.csv_source:
        overrides["csv_source"] = args.csv_source
    if args.page_url:
        overrides["page_url"] = args.page_url
    if args.storage:
        overrides["storage_path"] = Path(args.storage)
    if args.chronological:
        overrides["label_order"] = LabelOrder.CHRONOLOGICAL

    try:
        config = ViewerConfig.from_env(**overrides)
    except CarrierViewError as exc:
        print(f"configuration error: {exc}", file=sys.stderr)
        return 2

    out: list[str] = []
    result: dict[str, Any] = {}

    async with CarrierViewer(config) as viewer:
        try:
            startup = await viewer.start(args.page_url)
        except CarrierViewError as exc:
            print(f"startup failed: {exc}", file=sys.stderr)
            return 1

        store = viewer.store
        result["origin"] = startup.origin.value
        result["errors"] = [str(err) for err in startup.errors]
        result["record_count"] = startup.record_count
        result["chart"] = [{"label": label, "count": count} for label, count in store.chart_series.pairs()]

        out.append(_section("carrierview dump_view"))
        out.append(f"  source    : {config.csv_source}")
        out.append(f"  origin    : {startup.origin.value}")
        out.append(f"  records   : {startup.record_count}")
        for err in startup.errors:
            out.append(f"  !! {err}")

        out.append(_section("OUT OF SERVICE BY MONTH"))
        for label, count in store.chart_series.pairs():
            out.append(f"  {label:<14} {count}")
        out.append(f"  {'total':<14} {store.chart_series.total}")

        rows = _split_fields(args.pivot_rows)
        cols = _split_fields(args.pivot_cols)
        if rows or cols:
            try:
                table = viewer.pivot(rows, cols)
            except ValueError as exc:
                print(f"pivot failed: {exc}", file=sys.stderr)
                return 2
            _format_pivot(table, out)
            result["pivot"] = {
                "rows": list(table.rows),
                "cols": list(table.cols),
                "cells": [
                    {"row": list(r), "col": list(c), "count": table.count(r, c)}
                    for r in table.row_keys
                    for c in table.col_keys
                ],
            }

        if args.save:
            await viewer.save()
            out.append("\n  snapshot saved")
            result["saved"] = True

        if args.share:
            link = await viewer.share_link()
            out.append(_section("SHARE LINK"))
            out.append(link)
            result["share_link"] = link

    if args.json_mode:
        print(json.dumps(result, indent=2, ensure_ascii=False))
    else:
        print("\n".join(out))
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
