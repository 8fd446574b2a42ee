"""
app/services/upload_pipeline_service.py

Service layer for the upload-to-distribution pipeline.

Both entry points run the same stages strictly in sequence:

    1. UploadValidator.validate(): size, type, signature, filename
    2. SpreadsheetParser.parse(): CSV / XLS / XLSX to rows
    3. require_columns(): FirstName, Phone, Notes present
    4. ContactRowValidator.validate_rows(): file-wide row validation
    5. plan_distribution(): preview only, or
       DistributionOrchestrator.run(): commit

Any stage failure aborts the upload with a typed PipelineError before the
next stage starts. The commit path reads the active roster once and passes
that snapshot down; nothing below this service queries agents again.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from functools import lru_cache

from sqlalchemy.exc import SQLAlchemyError

from app.config import (
    ContactValidationSettings,
    DistributionSettings,
    UploadSettings,
    get_contact_validation_settings,
    get_distribution_settings,
    get_upload_settings,
)
from app.domain.contact import CANONICAL_COLUMNS, ContactItem
from app.domain.distribution import (
    AgentTaskGroup,
    DistributionDetail,
    DistributionFailed,
    DistributionRecord,
    TaskRecord,
)
from app.domain.errors import (
    DistributionFailedError,
    DistributionNotFoundError,
    DistributionPersistenceError,
    NoActiveAgentsError,
    PipelineError,
)
from app.domain.upload import RawUpload, UploadCommitResult, UploadPreview, ValidatedUpload
from app.logging_utils import log_event
from app.mappers.contact_columns import require_columns
from app.parsers.spreadsheet_parser import SpreadsheetParser
from app.repositories.distribution_store import DistributionStore
from app.services.distribution_engine import plan_distribution, resolve_target_agent_count
from app.services.distribution_orchestrator import DistributionOrchestrator
from app.validators.contact_validator import ContactRowValidator
from app.validators.upload_validator import UploadValidator

logger = logging.getLogger(__name__)


class UploadPipelineService:
    """
    Coordinates validation, parsing, distribution preview and commit.
    """

    def __init__(
        self,
        *,
        upload_settings: UploadSettings | None = None,
        contact_settings: ContactValidationSettings | None = None,
        distribution_settings: DistributionSettings | None = None,
        upload_validator: UploadValidator | None = None,
        parser: SpreadsheetParser | None = None,
        row_validator: ContactRowValidator | None = None,
        orchestrator: DistributionOrchestrator | None = None,
    ) -> None:
        self._upload_settings = upload_settings or get_upload_settings()
        self._contact_settings = contact_settings or get_contact_validation_settings()
        self._distribution_settings = distribution_settings or get_distribution_settings()
        self._upload_validator = upload_validator or UploadValidator(self._upload_settings)
        self._parser = parser or SpreadsheetParser()
        self._row_validator = row_validator or ContactRowValidator(self._contact_settings)
        self._orchestrator = orchestrator or DistributionOrchestrator(
            max_agent_count=self._distribution_settings.max_agent_count,
        )

    @property
    def max_upload_bytes(self) -> int:
        return self._upload_validator.max_bytes

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def preview(
        self,
        raw: RawUpload,
        *,
        store: DistributionStore,
        target_agent_count: int | None = None,
        include_distribution: bool = True,
    ) -> UploadPreview:
        """
        Validate an upload and compute its distribution without writing.

        With no active agents the preview still succeeds: `distribution` is
        None and `active_agents` is 0.
        """

        target = self._resolve_target(target_agent_count)
        validated, items = self._prepare(
            raw,
            notes_max_length=self._contact_settings.notes_max_length_preview,
        )

        agents = store.list_active_agents()
        distribution = None
        if include_distribution and agents:
            plan = plan_distribution(
                items,
                agents,
                target_agent_count=target,
                max_agent_count=self._distribution_settings.max_agent_count,
            )
            distribution = plan.to_preview()
        elif include_distribution:
            logger.warning(
                "Upload preview without distribution: no active agents file=%s",
                validated.filename,
            )

        log_event(
            logger,
            logging.INFO,
            "upload_previewed",
            filename=validated.filename,
            total_rows=len(items),
            active_agents=len(agents),
        )

        limit = self._upload_settings.preview_row_limit
        return UploadPreview(
            filename=validated.filename,
            total_rows=len(items),
            preview_rows=[item.to_row() for item in items[:limit]],
            columns=list(CANONICAL_COLUMNS),
            file_info=self._file_info(validated),
            distribution=distribution,
            active_agents=len(agents),
        )

    def commit(
        self,
        raw: RawUpload,
        *,
        store: DistributionStore,
        uploaded_by: uuid.UUID,
        target_agent_count: int | None = None,
    ) -> UploadCommitResult:
        """
        Run the full pipeline and persist one Distribution with its tasks.

        No record is written unless the file passed every validation stage
        and at least one agent is active. Once the Distribution exists it
        always ends `completed` or `failed`.
        """

        target = self._resolve_target(target_agent_count)
        validated, items = self._prepare(
            raw,
            notes_max_length=self._contact_settings.notes_max_length_commit,
        )

        try:
            with store.transaction():
                agents = store.list_active_agents()
                if not agents:
                    raise NoActiveAgentsError()
                distribution = store.create_distribution(
                    filename=validated.unique_filename,
                    original_name=validated.filename,
                    total_items=len(items),
                    uploaded_by=uploaded_by,
                )
        except NoActiveAgentsError as exc:
            self._log_rejected(exc, filename=validated.filename)
            raise
        except SQLAlchemyError as exc:
            logger.exception("Failed to create distribution file=%s", validated.filename)
            raise DistributionPersistenceError("Failed to create distribution record.") from exc

        outcome = self._orchestrator.run(
            store=store,
            distribution_id=distribution.id,
            items=items,
            agents=agents,
            target_agent_count=target,
        )

        if isinstance(outcome, DistributionFailed):
            self._mark_failed(store, distribution.id, outcome.reason)
            log_event(
                logger,
                logging.ERROR,
                "distribution_failed",
                distribution_id=distribution.id,
                filename=validated.filename,
                reason=outcome.reason,
            )
            raise DistributionFailedError(distribution_id=distribution.id, reason=outcome.reason)

        log_event(
            logger,
            logging.INFO,
            "upload_committed",
            distribution_id=distribution.id,
            filename=validated.filename,
            total_items=len(items),
            tasks_created=outcome.tasks_created,
        )
        return UploadCommitResult(
            distribution_id=distribution.id,
            filename=validated.filename,
            total_items=len(items),
            distribution={**outcome.plan.to_preview(), "tasks_created": outcome.tasks_created},
            tasks_created=outcome.tasks_created,
        )

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def list_distributions(
        self,
        *,
        store: DistributionStore,
        uploaded_by: uuid.UUID,
        limit: int = 100,
    ) -> list[DistributionRecord]:
        return store.list_distributions(uploaded_by=uploaded_by, limit=limit)

    def get_distribution_detail(
        self,
        *,
        store: DistributionStore,
        distribution_id: uuid.UUID,
        uploaded_by: uuid.UUID,
    ) -> DistributionDetail:
        """
        Load one distribution owned by `uploaded_by` with its tasks per agent.

        Distributions uploaded by someone else are reported as not found.
        """

        record = store.get_distribution(distribution_id)
        if record is None or record.uploaded_by != uploaded_by:
            raise DistributionNotFoundError()

        tasks = store.list_tasks(distribution_id)
        return DistributionDetail(
            distribution=record,
            agents=self._group_tasks(store, tasks),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _resolve_target(self, target_agent_count: int | None) -> int:
        return resolve_target_agent_count(
            target_agent_count,
            default=self._distribution_settings.default_agent_count,
            maximum=self._distribution_settings.max_agent_count,
        )

    def _prepare(
        self,
        raw: RawUpload,
        *,
        notes_max_length: int,
    ) -> tuple[ValidatedUpload, list[ContactItem]]:
        validated: ValidatedUpload | None = None
        try:
            validated = self._upload_validator.validate(raw)
            sheet = self._parser.parse(validated)
            require_columns(sheet)
            items = self._row_validator.validate_rows(
                sheet.rows,
                notes_max_length=notes_max_length,
            )
        except PipelineError as exc:
            self._log_rejected(exc, filename=validated.filename if validated else None)
            raise

        log_event(
            logger,
            logging.INFO,
            "upload_accepted",
            filename=validated.filename,
            stored_name=validated.unique_filename,
            file_format=validated.file_format.value,
            size=validated.size,
            total_rows=len(items),
        )
        return validated, items

    def _mark_failed(self, store: DistributionStore, distribution_id: uuid.UUID, reason: str) -> None:
        try:
            with store.transaction():
                store.mark_failed(distribution_id, reason)
        except Exception:  # noqa: BLE001
            logger.exception(
                "Failed to mark distribution failed distribution_id=%s",
                distribution_id,
            )

    @staticmethod
    def _group_tasks(
        store: DistributionStore,
        tasks: Sequence[TaskRecord],
    ) -> tuple[AgentTaskGroup, ...]:
        grouped: dict[uuid.UUID, list[TaskRecord]] = {}
        for task in tasks:
            grouped.setdefault(task.agent_id, []).append(task)

        agents = store.get_agents(list(grouped))
        groups: list[AgentTaskGroup] = []
        for agent_id, agent_tasks in grouped.items():
            agent = agents.get(agent_id)
            groups.append(
                AgentTaskGroup(
                    agent_id=agent_id,
                    agent_name=agent.name if agent else None,
                    agent_email=agent.email if agent else None,
                    tasks=tuple(agent_tasks),
                )
            )
        return tuple(groups)

    @staticmethod
    def _file_info(validated: ValidatedUpload) -> dict[str, object]:
        return {
            "original_name": validated.filename,
            "stored_name": validated.unique_filename,
            "format": validated.file_format.value,
            "content_type": validated.content_type,
            "size": validated.size,
            "received_at": validated.received_at,
        }

    @staticmethod
    def _log_rejected(exc: PipelineError, *, filename: str | None) -> None:
        log_event(
            logger,
            logging.WARNING,
            "upload_rejected",
            code=exc.code,
            filename=filename,
            message=exc.message,
        )


@lru_cache(maxsize=1)
def get_upload_pipeline_service() -> UploadPipelineService:
    """
    Return cached pipeline service configured from environment settings.
    """

    return UploadPipelineService()
