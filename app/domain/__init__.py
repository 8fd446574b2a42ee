"""
app/domain package marker.
"""

from app.domain.contact import CANONICAL_COLUMNS, ContactItem, ParsedRow, ParsedSheet
from app.domain.distribution import (
    AgentAssignment,
    AgentSnapshot,
    AgentTaskGroup,
    DistributionDetail,
    DistributionFailed,
    DistributionOutcome,
    DistributionPlan,
    DistributionRecord,
    DistributionSucceeded,
    DistributionSummary,
    TaskCreate,
    TaskRecord,
)
from app.domain.upload import (
    FileFormat,
    RawUpload,
    UploadCommitResult,
    UploadPreview,
    ValidatedUpload,
)

__all__ = [
    "AgentAssignment",
    "AgentSnapshot",
    "AgentTaskGroup",
    "CANONICAL_COLUMNS",
    "ContactItem",
    "DistributionDetail",
    "DistributionFailed",
    "DistributionOutcome",
    "DistributionPlan",
    "DistributionRecord",
    "DistributionSucceeded",
    "DistributionSummary",
    "FileFormat",
    "ParsedRow",
    "ParsedSheet",
    "RawUpload",
    "TaskCreate",
    "TaskRecord",
    "UploadCommitResult",
    "UploadPreview",
    "ValidatedUpload",
]
