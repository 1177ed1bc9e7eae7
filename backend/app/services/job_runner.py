"""Batch jobs run by the scheduler worker or on demand."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional

from app.services.data_service import repair_hierarchy
from app.services.document_store import DocumentStore

logger = logging.getLogger(__name__)

HIERARCHY_REPAIR_JOB = "hierarchy_repair"


@dataclass
class JobRunResult:
    job: str
    changed: bool
    repairs: Dict[str, int] = field(default_factory=dict)


def run_hierarchy_repair(store: DocumentStore, *, now: Optional[datetime] = None) -> JobRunResult:
    report = repair_hierarchy(store, now=now or datetime.now(timezone.utc))
    if report.changed:
        logger.info("Hierarchy repair applied: %s", report.as_dict())
    else:
        logger.debug("Hierarchy repair found nothing to fix")
    return JobRunResult(job=HIERARCHY_REPAIR_JOB, changed=report.changed, repairs=report.as_dict())
