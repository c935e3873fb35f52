"""
Tests for sequential batch processing and result publication.
"""

import asyncio

import pytest

from services.compression import (
    BatchProcessor,
    BatchState,
    BatchStatus,
    Failed,
    InputFile,
    Reduced,
    ReducedPayload,
    Skipped,
)


def make_file(name: str, media_type: str = "image/png") -> InputFile:
    return InputFile(name=name, media_type=media_type, payload=name.encode())


class ScriptedDispatch:
    """
    Returns outcomes by file name and records the batch status seen at each
    call. Names starting with 'skip' are skipped, 'fail' fail.
    """

    def __init__(self, state: BatchState):
        self.state = state
        self.seen = []
        self.statuses = []
        self.gates = {}

    async def reduce(self, file: InputFile):
        self.seen.append(file.name)
        self.statuses.append(self.state.status)
        if file.name in self.gates:
            await self.gates[file.name].wait()
        if file.name.startswith("skip"):
            return Skipped(reason="unsupported")
        if file.name.startswith("fail"):
            return Failed(cause=RuntimeError("boom"))
        return Reduced(payload=ReducedPayload(data=b"r-" + file.payload, media_type=file.media_type))


@pytest.fixture
def state():
    return BatchState()


@pytest.fixture
def dispatch(state):
    return ScriptedDispatch(state)


@pytest.fixture
def processor(dispatch, state):
    return BatchProcessor(dispatcher=dispatch, state=state)


class TestBatchProcessor:

    @pytest.mark.asyncio
    async def test_results_keep_input_order(self, processor):
        files = [make_file(name) for name in ["c.png", "a.png", "b.png"]]

        results = await processor.process_batch(files)

        assert [pair.original.name for pair in results] == ["c.png", "a.png", "b.png"]
        assert [pair.reduced.data for pair in results] == [b"r-c.png", b"r-a.png", b"r-b.png"]
        assert all(pair.original is file for pair, file in zip(results, files))

    @pytest.mark.asyncio
    async def test_skipped_and_failed_files_excluded(self, processor, dispatch):
        files = [
            make_file("one.png"),
            make_file("skip.txt", "text/plain"),
            make_file("fail.pdf", "application/pdf"),
            make_file("two.pdf", "application/pdf"),
        ]

        report = await processor.run(files)

        assert [pair.original.name for pair in report.results] == ["one.png", "two.pdf"]
        assert dispatch.seen == ["one.png", "skip.txt", "fail.pdf", "two.pdf"]
        assert report.total == 4
        assert report.errors == [
            {"filename": "skip.txt", "status": "skipped", "error": "unsupported"},
            {"filename": "fail.pdf", "status": "failed", "error": "boom"},
        ]

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_batch(self, processor):
        files = [make_file("fail-first.png"), make_file("after.png")]

        results = await processor.process_batch(files)

        assert [pair.original.name for pair in results] == ["after.png"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("names", [
        ["a.png", "b.png"],
        ["a.png", "fail.png", "skip.txt"],
    ])
    async def test_status_processing_during_batch_idle_after(self, processor, dispatch, state, names):
        assert state.status == BatchStatus.IDLE

        await processor.process_batch([make_file(name) for name in names])

        assert dispatch.statuses == [BatchStatus.PROCESSING] * len(names)
        assert state.status == BatchStatus.IDLE

    @pytest.mark.asyncio
    async def test_empty_batch(self, processor, state):
        results = await processor.process_batch([])

        assert results == []
        assert state.results == ()
        assert state.status == BatchStatus.IDLE

    @pytest.mark.asyncio
    async def test_new_batch_replaces_results(self, processor, state):
        await processor.process_batch([make_file("first.png"), make_file("second.png")])
        assert len(state.results) == 2

        await processor.process_batch([make_file("third.png")])

        assert [pair.original.name for pair in state.results] == ["third.png"]

    @pytest.mark.asyncio
    async def test_published_results_are_read_only(self, processor, state):
        await processor.process_batch([make_file("a.png")])

        assert isinstance(state.results, tuple)

    @pytest.mark.asyncio
    async def test_files_dispatched_one_at_a_time(self, processor, dispatch):
        gate = asyncio.Event()
        dispatch.gates["slow.png"] = gate

        task = asyncio.create_task(
            processor.process_batch([make_file("slow.png"), make_file("next.png")])
        )
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        assert dispatch.seen == ["slow.png"]

        gate.set()
        results = await task

        assert dispatch.seen == ["slow.png", "next.png"]
        assert len(results) == 2

    @pytest.mark.asyncio
    async def test_stale_batch_does_not_overwrite_newer_results(self, processor, dispatch, state):
        gate = asyncio.Event()
        dispatch.gates["old.png"] = gate

        old_task = asyncio.create_task(processor.run([make_file("old.png")]))
        await asyncio.sleep(0)
        assert state.status == BatchStatus.PROCESSING

        new_report = await processor.run([make_file("new.png")])

        # the old batch is still running
        assert new_report.published is True
        assert state.status == BatchStatus.PROCESSING
        assert state.in_flight == 1

        gate.set()
        old_report = await old_task

        assert old_report.published is False
        assert [pair.original.name for pair in old_report.results] == ["old.png"]
        assert [pair.original.name for pair in state.results] == ["new.png"]
        assert state.batch_id == new_report.batch_id
        assert state.status == BatchStatus.IDLE
        assert state.in_flight == 0
        assert state.generation == 2

    @pytest.mark.asyncio
    async def test_timed_out_batch_returns_to_idle(self, processor, dispatch, state):
        dispatch.gates["slow.png"] = asyncio.Event()

        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(processor.process_batch([make_file("slow.png")]), 0.05)

        assert state.status == BatchStatus.IDLE
        assert state.in_flight == 0
        assert state.results == ()

    @pytest.mark.asyncio
    async def test_cancelled_batch_keeps_previous_results(self, processor, dispatch, state):
        await processor.process_batch([make_file("kept.png")])
        dispatch.gates["slow.png"] = asyncio.Event()

        task = asyncio.create_task(processor.process_batch([make_file("slow.png")]))
        await asyncio.sleep(0)
        assert state.status == BatchStatus.PROCESSING

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert state.status == BatchStatus.IDLE
        assert [pair.original.name for pair in state.results] == ["kept.png"]

    @pytest.mark.asyncio
    async def test_processing_while_inputs_are_read(self, processor, dispatch, state):
        statuses = []

        async def read_files():
            for name in ["a.png", "skip.txt", "b.png"]:
                statuses.append(state.status)
                yield make_file(name)

        report = await processor.run(read_files())

        assert statuses == [BatchStatus.PROCESSING] * 3
        assert [pair.original.name for pair in report.results] == ["a.png", "b.png"]
        assert report.total == 3
        assert state.status == BatchStatus.IDLE
