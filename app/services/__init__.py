"""
app/services package marker.
"""

from app.services.distribution_engine import (
    plan_distribution,
    resolve_target_agent_count,
    split_counts,
)
from app.services.distribution_orchestrator import DistributionOrchestrator, build_task_payloads
from app.services.upload_pipeline_service import (
    UploadPipelineService,
    get_upload_pipeline_service,
)

__all__ = [
    "DistributionOrchestrator",
    "UploadPipelineService",
    "build_task_payloads",
    "get_upload_pipeline_service",
    "plan_distribution",
    "resolve_target_agent_count",
    "split_counts",
]
