"""
tests/test_sql_distribution_store.py

SQLDistributionStore and the db repositories against an in-memory SQLite
database. Exercises the roster ordering, bulk task insert, lifecycle
transitions and transactional rollback through real SQLAlchemy sessions.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from app.config import ContactValidationSettings, DistributionSettings, UploadSettings
from app.domain.distribution import DistributionSummary, TaskCreate
from app.domain.errors import DistributionFailedError
from app.domain.upload import RawUpload
from app.repositories.distribution_store import SQLDistributionStore
from app.services.upload_pipeline_service import UploadPipelineService
from db.base import Base
from db.models import Agent, Distribution, DistributionStatus, Task
from db.repositories.errors import DistributionStateError, SummaryMismatchError
from db.session import build_session_factory

_T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    try:
        yield build_session_factory(engine)
    finally:
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture()
def session(session_factory) -> Session:
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def roster(session: Session) -> list[Agent]:
    """Three active agents created out of insertion order plus one inactive."""
    agents = [
        Agent(name="Second", email="second@example.com", created_at=_T0 + timedelta(minutes=2)),
        Agent(name="First", email="first@example.com", created_at=_T0 + timedelta(minutes=1)),
        Agent(name="Third", email="third@example.com", created_at=_T0 + timedelta(minutes=3)),
        Agent(
            name="Retired",
            email="retired@example.com",
            is_active=False,
            created_at=_T0,
        ),
    ]
    with session.begin():
        session.add_all(agents)
    return agents


def _create(store: SQLDistributionStore, total_items: int, uploaded_by: uuid.UUID | None = None):
    with store.transaction():
        return store.create_distribution(
            filename="1760000000000_0123456789abcdef.csv",
            original_name="contacts.csv",
            total_items=total_items,
            uploaded_by=uploaded_by or uuid.uuid4(),
        )


class TestRoster:
    def test_active_agents_oldest_first(self, session, roster) -> None:
        store = SQLDistributionStore(session)
        assert [agent.name for agent in store.list_active_agents()] == ["First", "Second", "Third"]

    def test_get_agents_includes_inactive(self, session, roster) -> None:
        store = SQLDistributionStore(session)
        retired = roster[3]
        assert store.get_agents([retired.id])[retired.id].name == "Retired"


class TestLifecycle:
    def test_create_starts_processing(self, session, roster) -> None:
        store = SQLDistributionStore(session)
        record = _create(store, 3)

        assert record.status == DistributionStatus.PROCESSING
        assert record.summary is None
        assert store.get_distribution(record.id).original_name == "contacts.csv"

    def test_bulk_insert_and_complete_in_one_transaction(self, session, roster) -> None:
        store = SQLDistributionStore(session, task_batch_size=2)
        agents = store.list_active_agents()
        record = _create(store, 3)
        payloads = [
            TaskCreate(
                distribution_id=record.id,
                agent_id=agents[index % 2].id,
                first_name=f"Contact {index}",
                phone="5550101234",
                notes="",
                position=index,
            )
            for index in range(3)
        ]

        with store.transaction():
            assert store.bulk_create_tasks(payloads) == 3
            completed = store.mark_completed(
                record.id,
                DistributionSummary(total_agents=2, items_per_agent=1, remainder_items=1),
            )

        assert completed.status == DistributionStatus.COMPLETED
        assert completed.summary.to_dict() == {
            "total_agents": 2,
            "items_per_agent": 1,
            "remainder_items": 1,
        }
        tasks = store.list_tasks(record.id)
        assert [task.position for task in tasks] == [0, 1, 2]
        assert {task.status for task in tasks} == {"assigned"}
        assert len({task.assigned_at for task in tasks}) == 1

    def test_summary_must_cover_total_items(self, session, roster) -> None:
        store = SQLDistributionStore(session)
        record = _create(store, 5)

        with pytest.raises(SummaryMismatchError):
            with store.transaction():
                store.mark_completed(
                    record.id,
                    DistributionSummary(total_agents=2, items_per_agent=2, remainder_items=0),
                )
        assert store.get_distribution(record.id).status == DistributionStatus.PROCESSING

    def test_failed_transaction_leaves_no_tasks(self, session, roster) -> None:
        store = SQLDistributionStore(session)
        agent = store.list_active_agents()[0]
        record = _create(store, 2)

        with pytest.raises(RuntimeError):
            with store.transaction():
                store.bulk_create_tasks(
                    [
                        TaskCreate(
                            distribution_id=record.id,
                            agent_id=agent.id,
                            first_name="Ada",
                            phone="5550101234",
                            notes="",
                        )
                    ]
                )
                raise RuntimeError("simulated failure after insert")

        assert store.list_tasks(record.id) == []

    def test_mark_failed_records_reason(self, session, roster) -> None:
        store = SQLDistributionStore(session)
        record = _create(store, 2)

        with store.transaction():
            failed = store.mark_failed(record.id, "connection reset by peer")

        assert failed.status == DistributionStatus.FAILED
        assert failed.processing_error == "connection reset by peer"
        assert failed.summary is None

    def test_completed_distribution_cannot_be_failed(self, session, roster) -> None:
        store = SQLDistributionStore(session)
        record = _create(store, 1)
        with store.transaction():
            store.mark_completed(
                record.id,
                DistributionSummary(total_agents=1, items_per_agent=1, remainder_items=0),
            )

        with pytest.raises(DistributionStateError):
            with store.transaction():
                store.mark_failed(record.id, "late failure")

    def test_list_is_scoped_to_uploader(self, session, roster) -> None:
        store = SQLDistributionStore(session)
        mine = uuid.uuid4()
        first = _create(store, 1, uploaded_by=mine)
        _create(store, 1, uploaded_by=uuid.uuid4())

        assert [record.id for record in store.list_distributions(uploaded_by=mine)] == [first.id]


class TestPipelineOnSQL:
    @pytest.fixture()
    def pipeline(self) -> UploadPipelineService:
        return UploadPipelineService(
            upload_settings=UploadSettings(),
            contact_settings=ContactValidationSettings(),
            distribution_settings=DistributionSettings(),
        )

    def test_commit_persists_tasks_for_active_roster(self, session, roster, pipeline, csv_bytes, contact_rows) -> None:
        store = SQLDistributionStore(session)
        raw = RawUpload(content=csv_bytes(contact_rows(7)), filename="contacts.csv")

        result = pipeline.commit(raw, store=store, uploaded_by=uuid.uuid4())

        assert result.tasks_created == 7
        distribution = session.get(Distribution, result.distribution_id)
        assert distribution.status == DistributionStatus.COMPLETED
        assert (distribution.total_agents, distribution.items_per_agent, distribution.remainder_items) == (3, 2, 1)
        counts = dict(
            session.execute(
                select(Task.agent_id, func.count())
                .where(Task.distribution_id == result.distribution_id)
                .group_by(Task.agent_id)
            ).all()
        )
        by_name = {agent.name: counts.get(agent.id, 0) for agent in roster}
        assert by_name == {"First": 3, "Second": 2, "Third": 2, "Retired": 0}

    def test_insert_failure_leaves_failed_distribution_and_no_tasks(
        self,
        session,
        roster,
        pipeline,
        csv_bytes,
        contact_rows,
        monkeypatch,
    ) -> None:
        store = SQLDistributionStore(session)

        def _explode(tasks):
            raise RuntimeError("disk full")

        monkeypatch.setattr(store, "bulk_create_tasks", _explode)
        raw = RawUpload(content=csv_bytes(contact_rows(4)), filename="contacts.csv")

        with pytest.raises(DistributionFailedError) as exc_info:
            pipeline.commit(raw, store=store, uploaded_by=uuid.uuid4())

        distribution = session.get(Distribution, exc_info.value.distribution_id)
        assert distribution.status == DistributionStatus.FAILED
        assert distribution.processing_error == "disk full"
        assert session.scalar(select(func.count()).select_from(Task)) == 0
