"""
Tests for the recompute orchestrator.

These tests verify that only the latest generation is ever published, even
when older runs finish later or fail.
"""

import asyncio
import threading

import pytest

from finance_docs.generator import generate_outputs
from finance_docs.orchestrator import RecomputeOrchestrator, RunStatus


def gated_generator(gates: dict[str, threading.Event], started: dict[str, threading.Event]):
    """Generator that blocks on gates[doc_no] (if any) before generating."""
    def generator(doc):
        if doc.doc_no in started:
            started[doc.doc_no].set()
        if doc.doc_no in gates:
            assert gates[doc.doc_no].wait(timeout=5)
        return generate_outputs(doc)
    return generator


@pytest.fixture
def orchestrator():
    orch = RecomputeOrchestrator(max_workers=4)
    yield orch
    orch.shutdown()


class TestLifecycle:

    def test_idle_before_first_run(self, orchestrator):
        assert orchestrator.state == RunStatus.IDLE
        assert orchestrator.current is None
        assert orchestrator.latest_generation == 0

    def test_successful_run_published(self, orchestrator, valid_doc):
        run = orchestrator.recompute(valid_doc)

        assert run.status == RunStatus.PUBLISHED
        assert orchestrator.state == RunStatus.PUBLISHED
        state = orchestrator.current
        assert state.ok
        assert state.generation == run.generation == 1
        assert state.outputs.totals.rounded_grand_total == 1180

    def test_failed_run_published_as_error(self, orchestrator, make_doc):
        run = orchestrator.recompute(make_doc(line_items=[]))

        assert run.status == RunStatus.FAILED
        state = orchestrator.current
        assert not state.ok
        assert state.outputs is None
        assert state.error_codes == ["missing_field:line_items"]

    def test_oversized_amount_published_with_rule_code(self, orchestrator, make_doc, make_line):
        doc = make_doc(line_items=[make_line(quantity=10**15, unit_price=10**13)])
        run = orchestrator.recompute(doc)

        assert run.status == RunStatus.FAILED
        assert orchestrator.current.error_codes == ["range_error:amount"]

    def test_failure_replaced_by_next_success(self, orchestrator, make_doc, valid_doc):
        orchestrator.recompute(make_doc(line_items=[]))
        orchestrator.recompute(valid_doc)
        assert orchestrator.current.ok
        assert orchestrator.current.generation == 2

    def test_unexpected_exception_becomes_failure(self, valid_doc):
        def broken(doc):
            raise RuntimeError("renderer exploded")

        orch = RecomputeOrchestrator(generator=broken)
        run = orch.recompute(valid_doc)

        assert run.status == RunStatus.FAILED
        assert orch.current.error == "renderer exploded"

    def test_submit_runs_in_background(self, orchestrator, valid_doc):
        run = orchestrator.submit(valid_doc)
        run.wait(timeout=5)
        assert run.status == RunStatus.PUBLISHED
        assert orchestrator.current.generation == run.generation

    def test_recompute_async(self, orchestrator, valid_doc):
        run = asyncio.run(orchestrator.recompute_async(valid_doc))
        assert run.status == RunStatus.PUBLISHED
        assert orchestrator.current.outputs.amount_in_words.endswith("Rupees Only")


class TestGenerationOrdering:

    def test_older_run_finishing_later_is_discarded(self, make_doc):
        gates = {"G1": threading.Event()}
        started = {"G1": threading.Event()}
        with RecomputeOrchestrator(generator=gated_generator(gates, started), max_workers=2) as orch:
            run1 = orch.submit(make_doc(doc_no="G1"))
            assert started["G1"].wait(timeout=5)
            run2 = orch.submit(make_doc(doc_no="G2"))
            run2.wait(timeout=5)

            assert run1.status == RunStatus.SUPERSEDED
            assert orch.current.generation == run2.generation

            gates["G1"].set()
            run1.wait(timeout=5)

            assert run1.status == RunStatus.SUPERSEDED
            assert run2.status == RunStatus.PUBLISHED
            assert orch.current.generation == run2.generation
            assert '"doc_no": "G2"' in orch.current.outputs.outputs["json"]

    def test_superseded_failure_never_published(self, make_doc, make_line):
        gates = {"BAD": threading.Event()}
        started = {"BAD": threading.Event()}
        with RecomputeOrchestrator(generator=gated_generator(gates, started), max_workers=2) as orch:
            bad = orch.submit(make_doc(doc_no="BAD", line_items=[make_line(quantity=-1)]))
            assert started["BAD"].wait(timeout=5)
            good = orch.submit(make_doc(doc_no="GOOD"))
            good.wait(timeout=5)
            gates["BAD"].set()
            bad.wait(timeout=5)

            assert orch.state == RunStatus.PUBLISHED
            assert orch.current.error is None

    def test_stale_result_does_not_replace_idle(self, make_doc):
        gates = {"G1": threading.Event(), "G2": threading.Event()}
        started = {"G1": threading.Event(), "G2": threading.Event()}
        with RecomputeOrchestrator(generator=gated_generator(gates, started), max_workers=2) as orch:
            run1 = orch.submit(make_doc(doc_no="G1"))
            run2 = orch.submit(make_doc(doc_no="G2"))
            assert started["G1"].wait(timeout=5)

            gates["G1"].set()
            run1.wait(timeout=5)
            assert orch.state == RunStatus.IDLE
            assert orch.current is None

            gates["G2"].set()
            run2.wait(timeout=5)
            assert orch.current.generation == run2.generation

    def test_rapid_edits_publish_latest(self, orchestrator, make_doc):
        runs = [orchestrator.submit(make_doc(doc_no=f"EDIT-{i}")) for i in range(20)]
        for run in runs:
            run.wait(timeout=10)

        assert orchestrator.current.generation == 20
        assert '"doc_no": "EDIT-19"' in orchestrator.current.outputs.outputs["json"]
        assert runs[-1].status == RunStatus.PUBLISHED
        assert all(run.status != RunStatus.RUNNING for run in runs)


class TestCompareAndPublish:

    def test_complete_rejects_stale_generation(self, valid_doc):
        orch = RecomputeOrchestrator()
        first = orch.begin()
        second = orch.begin()

        assert first.status == RunStatus.SUPERSEDED
        assert orch.complete(first, outputs=generate_outputs(valid_doc)) is False
        assert orch.current is None
        assert orch.complete(second, outputs=generate_outputs(valid_doc)) is True
        assert orch.current.generation == second.generation
