"""
Background Tasks Package

Contains Celery tasks for async processing:
- summary_tasks: Audit summary generation
"""

from app.tasks.summary_tasks import *
