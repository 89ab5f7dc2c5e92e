"""Audit logging for clustering runs.

Main Components
---------------
- AuditLogger: JSONL event logger accepted by every clustering component
- LogEvent: event envelope written per line
"""

from ercluster.audit.helpers import generate_run_id
from ercluster.audit.logger import AuditLogger
from ercluster.audit.models import LOG_LEVELS, LogEvent

__all__ = [
    "AuditLogger",
    "LogEvent",
    "LOG_LEVELS",
    "generate_run_id",
]
