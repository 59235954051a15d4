"""
Pipeline stage classification.

Two fixed, ordered stage sets drive the KPI figures:
- PRIORITY_STAGES: QR Returned through FA Sent (late funnel), counted as
  Priority Candidates
- FULL_PIPELINE_STAGES: New Lead through FA Sent (whole funnel), whose dollar
  values make up the Weighted Pipeline Value

FULL_PIPELINE_STAGES always contains every priority stage.
"""

from typing import FrozenSet, Tuple


PRIORITY_STAGES: Tuple[str, ...] = (
    'QR Returned',
    'FDD Sent',
    'FDD Signed',
    'FDD Review Call Sched.',
    'FDD Review Call Compl.',
    'FA Sent',
)

FULL_PIPELINE_STAGES: Tuple[str, ...] = (
    'New Lead',
    'Outbound Call',
    'Inbound Contact',
    'Initial Call Scheduled',
    'Initial Call Complete',
    'QR',
) + PRIORITY_STAGES

_PRIORITY_SET: FrozenSet[str] = frozenset(PRIORITY_STAGES)
_FULL_PIPELINE_SET: FrozenSet[str] = frozenset(FULL_PIPELINE_STAGES)


def is_priority_stage(stage: str) -> bool:
    """Return True if the stage counts toward Priority Candidates."""
    return stage in _PRIORITY_SET


def is_full_pipeline_stage(stage: str) -> bool:
    """Return True if the stage's dollar value counts toward Weighted Pipeline Value."""
    return stage in _FULL_PIPELINE_SET
