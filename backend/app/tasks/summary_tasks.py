"""
Summary Tasks

Background generation of audit summaries.
"""

import asyncio
import logging
from uuid import UUID

from celery import shared_task

from app.core.exceptions import (
    AuditNotFoundError,
    InvalidCheckResultError,
    SummaryPersistenceError,
)
from app.database import task_session_maker
from app.services.summary_service import SummaryService

logger = logging.getLogger(__name__)


def run_async(coro):
    """Helper to run async code in sync context."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@shared_task(bind=True, max_retries=3)
def generate_audit_summary(self, audit_id: str):
    """Generate or refresh the summary of an audit."""
    try:
        return run_async(_generate_audit_summary(audit_id))
    except SummaryPersistenceError as exc:
        logger.warning(f"Summary for audit {audit_id} failed at {exc.stage}, retrying")
        raise self.retry(exc=exc)


async def _generate_audit_summary(audit_id: str) -> dict:
    """Async implementation of summary generation."""
    async with task_session_maker() as session_maker, session_maker() as session:
        service = SummaryService(session)
        try:
            summary = await service.generate(UUID(audit_id))
        except AuditNotFoundError:
            return {"audit_id": audit_id, "error": "Audit not found"}
        except InvalidCheckResultError as e:
            logger.error(f"Summary for audit {audit_id} rejected: {e.message}")
            return {"audit_id": audit_id, "error": e.message}

        return {
            "audit_id": audit_id,
            "summary_id": str(summary.id),
            "overall_score": summary.overall_score,
            "category_count": len(summary.category_scores),
            "total_issues": summary.total_issues,
        }
