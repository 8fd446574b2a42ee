"""
app/schemas package marker.
"""

from app.schemas.distributions import (
    AgentTasksResponse,
    DistributionDetailResponse,
    DistributionListResponse,
    DistributionResponse,
    DistributionSummaryResponse,
    TaskResponse,
)
from app.schemas.uploads import (
    AgentDistributionResponse,
    CommittedDistributionResponse,
    DistributionPreviewResponse,
    FileInfoResponse,
    UploadCommitResponse,
    UploadPreviewResponse,
)

__all__ = [
    "AgentDistributionResponse",
    "AgentTasksResponse",
    "CommittedDistributionResponse",
    "DistributionDetailResponse",
    "DistributionListResponse",
    "DistributionPreviewResponse",
    "DistributionResponse",
    "DistributionSummaryResponse",
    "FileInfoResponse",
    "TaskResponse",
    "UploadCommitResponse",
    "UploadPreviewResponse",
]
