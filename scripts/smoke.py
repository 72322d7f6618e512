# scripts/smoke.py
"""
Smoke test script for the DocExtract document pipeline.

Runs the full per-document pipeline (status transitions, resolver, report
writer, result upload) against in-memory stores. The analysis engine replays
a saved analysis response instead of calling AWS.

Usage
-----
1. Test with the built-in sample blocks:
    $ python scripts/smoke.py

2. Test with a saved analysis response:
    $ python scripts/smoke.py --file samples/response.json --out smoke.xlsx
"""

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from docextract.adapters.memory import InMemoryJobStore, InMemoryObjectStore
from docextract.core.contracts.block import Block, load_blocks
from docextract.core.contracts.job import ObjectLocation, build_upload_key
from docextract.core.coordinator.budget import Deadline
from docextract.core.coordinator.ports import AnalysisPage
from docextract.core.settings import load_settings
from docextract.pipelines.document_report import DocumentReportPipeline
from docextract.report.reader import read_sheets

# --------------------------------------------------------------------------- #
# Environment Setup
# --------------------------------------------------------------------------- #
env_path = Path(".env")
if env_path.exists():
    load_dotenv(env_path)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

# --------------------------------------------------------------------------- #
# Test Data
# --------------------------------------------------------------------------- #
SAMPLE_BLOCKS: list[dict[str, Any]] = [
    {"Id": "l1", "BlockType": "LINE", "Text": "INVOICE", "Page": 1, "Confidence": 99.7},
    {
        "Id": "k1",
        "BlockType": "KEY_VALUE_SET",
        "EntityTypes": ["KEY"],
        "Page": 1,
        "Confidence": 93.2,
        "Relationships": [{"Type": "CHILD", "Ids": ["w1"]}, {"Type": "VALUE", "Ids": ["v1"]}],
    },
    {
        "Id": "v1",
        "BlockType": "KEY_VALUE_SET",
        "EntityTypes": ["VALUE"],
        "Relationships": [{"Type": "CHILD", "Ids": ["w2"]}],
    },
    {"Id": "w1", "BlockType": "WORD", "Text": "Number:"},
    {"Id": "w2", "BlockType": "WORD", "Text": "INV-001"},
    {"Id": "t1", "BlockType": "TABLE", "Relationships": [{"Type": "CHILD", "Ids": ["c1", "c2"]}]},
    {"Id": "c1", "BlockType": "CELL", "RowIndex": 1, "ColumnIndex": 1, "Relationships": [{"Type": "CHILD", "Ids": ["w3"]}]},
    {"Id": "c2", "BlockType": "CELL", "RowIndex": 2, "ColumnIndex": 2, "Relationships": [{"Type": "CHILD", "Ids": ["w4"]}]},
    {"Id": "w3", "BlockType": "WORD", "Text": "Item"},
    {"Id": "w4", "BlockType": "WORD", "Text": "42"},
]


class ReplayEngine:
    """Analysis engine that answers every request with the same blocks."""

    def __init__(self, blocks: list[Block]) -> None:
        self.blocks = blocks

    def submit(self, document: ObjectLocation) -> str:
        return "replay-job"

    def poll(self, job_id: str, next_token: str | None = None) -> AnalysisPage:
        return AnalysisPage(status="SUCCEEDED", blocks=list(self.blocks))

    def analyze_sync(self, document: ObjectLocation) -> list[Block]:
        return list(self.blocks)


def main() -> None:
    """Execute the smoke test workflow."""
    parser = argparse.ArgumentParser(description="Run DocExtract Smoke Test")
    parser.add_argument("--file", "-f", type=str, help="Saved analysis response JSON")
    parser.add_argument("--out", "-o", type=str, help="Write the generated report here")
    args = parser.parse_args()

    # 1. Prepare blocks
    if args.file:
        input_path = Path(args.file)
        if not input_path.exists():
            print(f"❌ File not found: {input_path}")
            return
        blocks = load_blocks(json.loads(input_path.read_text(encoding="utf-8")))
    else:
        blocks = load_blocks(SAMPLE_BLOCKS)
    print(f"📂 {len(blocks)} blocks loaded")

    # 2. Wire in-memory services and register the upload
    settings = load_settings().model_copy(update={"poll_interval_seconds": 0.0})
    objects, jobs = InMemoryObjectStore(), InMemoryJobStore()
    upload = ObjectLocation(settings.upload_bucket, build_upload_key("smoke-ack", "sample.png"))
    objects.put(upload, b"not a real image", "image/png")
    jobs.create("smoke-ack", "sample.png", upload.key)

    pipeline = DocumentReportPipeline(ReplayEngine(blocks), objects, jobs, settings)

    # 3. Execution Phase
    try:
        outcome = pipeline.process(upload, Deadline.after(settings.default_budget_seconds))
    except Exception as exc:
        print(f"\n❌ Pipeline Crashed: {exc}")
        traceback.print_exc()
        return

    # 4. Inspection Phase
    print("\n" + "=" * 60)
    print(f"✅ Pipeline finished: {outcome.status.value}")
    print("=" * 60)

    record = jobs.get("smoke-ack")
    print(f"\n📝 Job record: {record.model_dump() if record else None}")

    assert outcome.result is not None
    data = objects.get(outcome.result)
    for sheet, rows in read_sheets(data).items():
        print(f"\n📌 {sheet}: {len(rows)} row(s)")
        for row in rows[:5]:
            print(f"  - {row}")

    if args.out:
        Path(args.out).write_bytes(data)
        print(f"\n💾 Report saved to: {args.out}")


if __name__ == "__main__":
    main()
