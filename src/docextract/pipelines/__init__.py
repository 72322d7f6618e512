"""Pipeline entry points for DocExtract.

Currently exposed:

- :class:`DocumentReportPipeline` — upload -> analysis -> resolver -> report,
  implemented in ``document_report.py``.
"""

from __future__ import annotations

from .document_report import DocumentOutcome, DocumentReportPipeline

__all__ = ["DocumentOutcome", "DocumentReportPipeline"]
