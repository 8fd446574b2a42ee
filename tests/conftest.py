"""
tests/conftest.py

Shared fixtures: an in-memory DistributionStore, an agent roster, and
builders for CSV and XLSX upload payloads. Nothing here needs a database
server.
"""

from __future__ import annotations

import csv
import dataclasses
import io
import uuid
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone

import pytest
from openpyxl import Workbook

from app.config import ContactValidationSettings, DistributionSettings, UploadSettings
from app.domain.distribution import (
    AgentSnapshot,
    DistributionRecord,
    DistributionSummary,
    TaskCreate,
    TaskRecord,
)
from app.domain.upload import RawUpload
from app.services.upload_pipeline_service import UploadPipelineService

CSV_CONTENT_TYPE = "text/csv"
XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

_EPOCH = datetime(2026, 1, 1, tzinfo=timezone.utc)


class InMemoryDistributionStore:
    """
    DistributionStore fake with transactional rollback.

    Set `fail_bulk_insert` to an exception to make the next task insert fail.
    """

    def __init__(self, agents: Sequence[AgentSnapshot] = ()) -> None:
        self.agents: list[AgentSnapshot] = list(agents)
        self.inactive_agents: list[AgentSnapshot] = []
        self.distributions: dict[uuid.UUID, DistributionRecord] = {}
        self.tasks: list[TaskRecord] = []
        self.fail_bulk_insert: Exception | None = None
        self.fail_mark_completed: Exception | None = None
        self.bulk_insert_calls = 0
        self.roster_reads = 0
        self._ticks = 0

    @contextmanager
    def transaction(self) -> Iterator[None]:
        snapshot = (dict(self.distributions), list(self.tasks))
        try:
            yield
        except Exception:
            self.distributions, self.tasks = snapshot
            raise

    def list_active_agents(self) -> list[AgentSnapshot]:
        self.roster_reads += 1
        return list(self.agents)

    def get_agents(self, agent_ids: Sequence[uuid.UUID]) -> dict[uuid.UUID, AgentSnapshot]:
        wanted = set(agent_ids)
        return {
            agent.id: agent
            for agent in [*self.agents, *self.inactive_agents]
            if agent.id in wanted
        }

    def create_distribution(
        self,
        *,
        filename: str,
        original_name: str,
        total_items: int,
        uploaded_by: uuid.UUID,
    ) -> DistributionRecord:
        record = DistributionRecord(
            id=uuid.uuid4(),
            filename=filename,
            original_name=original_name,
            total_items=total_items,
            status="processing",
            uploaded_by=uploaded_by,
            created_at=self._tick(),
        )
        self.distributions[record.id] = record
        return record

    def bulk_create_tasks(self, tasks: Sequence[TaskCreate]) -> int:
        self.bulk_insert_calls += 1
        if self.fail_bulk_insert is not None:
            raise self.fail_bulk_insert
        assigned_at = self._tick()
        for task in tasks:
            self.tasks.append(
                TaskRecord(
                    id=uuid.uuid4(),
                    distribution_id=task.distribution_id,
                    agent_id=task.agent_id,
                    first_name=task.first_name,
                    phone=task.phone,
                    notes=task.notes,
                    status="assigned",
                    position=task.position,
                    assigned_at=assigned_at,
                )
            )
        return len(tasks)

    def mark_completed(
        self,
        distribution_id: uuid.UUID,
        summary: DistributionSummary,
    ) -> DistributionRecord:
        if self.fail_mark_completed is not None:
            raise self.fail_mark_completed
        record = self.distributions[distribution_id]
        covered = summary.total_agents * summary.items_per_agent + summary.remainder_items
        if covered != record.total_items:
            raise ValueError("summary does not cover total_items")
        updated = dataclasses.replace(
            record,
            status="completed",
            summary=summary,
            completed_at=self._tick(),
        )
        self.distributions[distribution_id] = updated
        return updated

    def mark_failed(self, distribution_id: uuid.UUID, reason: str) -> DistributionRecord:
        record = self.distributions[distribution_id]
        updated = dataclasses.replace(record, status="failed", processing_error=reason)
        self.distributions[distribution_id] = updated
        return updated

    def get_distribution(self, distribution_id: uuid.UUID) -> DistributionRecord | None:
        return self.distributions.get(distribution_id)

    def list_distributions(
        self,
        *,
        uploaded_by: uuid.UUID | None = None,
        limit: int = 100,
    ) -> list[DistributionRecord]:
        records = [
            record
            for record in self.distributions.values()
            if uploaded_by is None or record.uploaded_by == uploaded_by
        ]
        records.sort(key=lambda record: record.created_at, reverse=True)
        return records[:limit]

    def list_tasks(self, distribution_id: uuid.UUID) -> list[TaskRecord]:
        return sorted(
            (task for task in self.tasks if task.distribution_id == distribution_id),
            key=lambda task: task.position,
        )

    def _tick(self) -> datetime:
        self._ticks += 1
        return _EPOCH + timedelta(seconds=self._ticks)


def build_agents(count: int) -> list[AgentSnapshot]:
    return [
        AgentSnapshot(
            id=uuid.UUID(int=index + 1),
            name=f"Agent {index + 1}",
            email=f"agent{index + 1}@example.com",
        )
        for index in range(count)
    ]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_agents() -> Callable[[int], list[AgentSnapshot]]:
    return build_agents


@pytest.fixture()
def make_store() -> Callable[..., InMemoryDistributionStore]:
    def _make(agent_count: int = 5) -> InMemoryDistributionStore:
        return InMemoryDistributionStore(build_agents(agent_count))

    return _make


@pytest.fixture()
def store() -> InMemoryDistributionStore:
    return InMemoryDistributionStore(build_agents(5))


@pytest.fixture()
def uploader_id() -> uuid.UUID:
    return uuid.UUID("11111111-2222-3333-4444-555555555555")


@pytest.fixture()
def pipeline() -> UploadPipelineService:
    """Pipeline service with default limits, independent of the environment."""
    return UploadPipelineService(
        upload_settings=UploadSettings(),
        contact_settings=ContactValidationSettings(),
        distribution_settings=DistributionSettings(),
    )


@pytest.fixture()
def csv_bytes() -> Callable[..., bytes]:
    def _build(
        rows: Sequence[Sequence[str]],
        header: Sequence[str] = ("FirstName", "Phone", "Notes"),
    ) -> bytes:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(header)
        writer.writerows(rows)
        return buffer.getvalue().encode("utf-8")

    return _build


@pytest.fixture()
def xlsx_bytes() -> Callable[..., bytes]:
    def _build(
        rows: Sequence[Sequence[object]],
        header: Sequence[str] | None = ("FirstName", "Phone", "Notes"),
    ) -> bytes:
        workbook = Workbook()
        worksheet = workbook.active
        if header is not None:
            worksheet.append(list(header))
        for row in rows:
            worksheet.append(list(row))
        buffer = io.BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()

    return _build


@pytest.fixture()
def contact_rows() -> Callable[[int], list[list[str]]]:
    def _build(count: int) -> list[list[str]]:
        return [
            [f"Contact {index + 1}", f"+1 555 010 {index:04d}", f"note {index + 1}"]
            for index in range(count)
        ]

    return _build


@pytest.fixture()
def csv_upload(csv_bytes, contact_rows) -> Callable[..., RawUpload]:
    def _build(count: int = 10, filename: str = "contacts.csv") -> RawUpload:
        return RawUpload(
            content=csv_bytes(contact_rows(count)),
            filename=filename,
            content_type=CSV_CONTENT_TYPE,
        )

    return _build
