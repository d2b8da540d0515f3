import asyncio
import logging
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from insureflow.core.exceptions import DatabaseError, InvalidShareError, StorageError
from insureflow.models.artifacts import UploadedArtifact
from insureflow.services.workflow.executor import WorkflowExecutor


class FakeTransaction:
    def __init__(self, session):
        self.session = session

    async def __aenter__(self):
        self.session.began += 1
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.session.committed += 1
        else:
            self.session.rolled_back += 1
        return False


class FakeSession:
    def __init__(self):
        self.began = self.committed = self.rolled_back = 0

    def begin(self):
        return FakeTransaction(self)


def artifact(key: str) -> UploadedArtifact:
    return UploadedArtifact(storage_key=key, name=key, content_type="application/pdf", doc_type="scan")


@pytest.fixture
def session():
    return FakeSession()


@pytest.mark.asyncio
async def test_commit_discards_log(session, blob_store):
    executor = WorkflowExecutor(session, blob_store)
    captured = {}

    async def steps(log):
        blob_store.objects["k1"] = b"x"
        log.record(artifact("k1"))
        captured["log"] = log
        return "done"

    assert await executor.execute("op", steps) == "done"
    assert session.committed == 1
    assert blob_store.deleted == []
    assert len(captured["log"]) == 0
    assert captured["log"].closed


@pytest.mark.asyncio
async def test_failure_rolls_back_and_deletes_in_reverse(session, blob_store):
    executor = WorkflowExecutor(session, blob_store)

    async def steps(log):
        for key in ("k1", "k2", "k3"):
            log.record(artifact(key))
        raise InvalidShareError(120)

    with pytest.raises(InvalidShareError):
        await executor.execute("op", steps)

    assert session.rolled_back == 1
    assert blob_store.deleted == ["k3", "k2", "k1"]
    assert executor.last_report.orphaned == []


@pytest.mark.asyncio
async def test_failure_before_any_upload_deletes_nothing(session, blob_store):
    executor = WorkflowExecutor(session, blob_store)

    async def steps(log):
        raise InvalidShareError(-1)

    with pytest.raises(InvalidShareError):
        await executor.execute("op", steps)

    assert blob_store.deleted == []
    assert executor.last_report is None


@pytest.mark.asyncio
async def test_delete_failure_is_logged_and_original_error_kept(session, make_blob_store, caplog):
    store = make_blob_store(fail_on_delete=True)
    executor = WorkflowExecutor(session, store)

    async def steps(log):
        log.record(artifact("k1"))
        log.record(artifact("k2"))
        raise InvalidShareError(101)

    with caplog.at_level(logging.ERROR, logger="insureflow.services.workflow.executor"):
        with pytest.raises(InvalidShareError):
            await executor.execute("op", steps)

    assert executor.last_report.orphaned == ["k2", "k1"]
    orphan_messages = [r.getMessage() for r in caplog.records if "orphaned object" in r.getMessage()]
    assert len(orphan_messages) == 2


@pytest.mark.asyncio
async def test_partial_delete_failure_continues(session):
    store = MagicMock()
    deleted = []

    async def delete(key):
        if key == "k2":
            raise StorageError("Delete failed: boom")
        deleted.append(key)

    store.delete = delete
    executor = WorkflowExecutor(session, store)

    async def steps(log):
        for key in ("k1", "k2", "k3"):
            log.record(artifact(key))
        raise InvalidShareError(101)

    with pytest.raises(InvalidShareError):
        await executor.execute("op", steps)

    assert deleted == ["k3", "k1"]
    assert executor.last_report.orphaned == ["k2"]


@pytest.mark.asyncio
async def test_storage_layer_error_becomes_database_error(session, blob_store):
    executor = WorkflowExecutor(session, blob_store)

    async def steps(log):
        log.record(artifact("k1"))
        raise OperationalError("INSERT", {}, Exception("disk I/O error"))

    with pytest.raises(DatabaseError) as exc_info:
        await executor.execute("op", steps)

    assert isinstance(exc_info.value.original_error, OperationalError)
    assert blob_store.deleted == ["k1"]


@pytest.mark.asyncio
async def test_cancellation_is_compensated(session, blob_store):
    executor = WorkflowExecutor(session, blob_store)
    started = asyncio.Event()

    async def steps(log):
        log.record(artifact("k1"))
        started.set()
        await asyncio.sleep(10)

    task = asyncio.create_task(executor.execute("op", steps))
    await started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task

    assert session.rolled_back == 1
    assert blob_store.deleted == ["k1"]


@pytest.mark.asyncio
async def test_each_invocation_gets_its_own_log(session, blob_store):
    executor = WorkflowExecutor(session, blob_store)
    logs = []

    async def steps(log):
        logs.append(log)
        log.record(artifact(f"k{len(logs)}"))
        raise InvalidShareError(101)

    for _ in range(2):
        with pytest.raises(InvalidShareError):
            await executor.execute("op", steps)

    assert logs[0] is not logs[1]
    assert blob_store.deleted == ["k1", "k2"]
