"""Tests for the scan controller."""

from __future__ import annotations

import asyncio

from blepanel.config import ScanningConfig
from blepanel.core import DeviceRegistry, NoticeCenter, ScanController
from blepanel.models import ErrorKind, NoticeLevel
from blepanel.stack import MockBleStack


def _controller(duration: float = 0.05, **stack_kwargs):
    stack = MockBleStack(peripherals=[], **stack_kwargs)
    registry = DeviceRegistry()
    notices = NoticeCenter()
    config = ScanningConfig(
        duration=duration, service_uuids=["180d"], allow_duplicates=False
    )
    return ScanController(stack, registry, config, notices), stack, registry, notices


def test_start_scan_calls_stack_and_activates_session():
    async def _run():
        controller, stack, _registry, _notices = _controller()
        started = await controller.start_scan()
        session = controller.session
        controller.close()
        return started, session, stack.calls

    started, session, calls = asyncio.run(_run())

    assert started is True
    assert session.active is True
    assert session.started_at is not None
    assert session.timeout_duration_ms == 50
    assert calls == [("scan", ["180d"], 0.05, False)]


def test_start_while_scanning_is_a_no_op():
    async def _run():
        controller, stack, _registry, _notices = _controller(duration=1.0)
        await controller.start_scan()
        session = controller.session
        again = await controller.start_scan()
        same = controller.session is session
        controller.close()
        return again, same, controller.session.active, stack.calls

    again, same, active, calls = asyncio.run(_run())

    assert again is False
    assert same is True
    assert active is True
    assert len(calls) == 1


def test_timer_returns_to_idle():
    async def _run():
        controller, _stack, _registry, _notices = _controller(duration=0.05)
        await controller.start_scan()
        await asyncio.sleep(0.15)
        return controller.is_scanning

    assert asyncio.run(_run()) is False


def test_stop_event_returns_to_idle_immediately():
    async def _run():
        controller, _stack, _registry, _notices = _controller(duration=5.0)
        await controller.start_scan()
        controller.on_scan_stopped()
        return controller.is_scanning

    assert asyncio.run(_run()) is False


def test_stale_timer_does_not_end_newer_session():
    async def _run():
        controller, _stack, _registry, _notices = _controller(duration=0.2)
        await controller.start_scan()
        await asyncio.sleep(0.1)
        controller.on_scan_stopped()
        await controller.start_scan()
        await asyncio.sleep(0.15)
        still_scanning = controller.is_scanning
        await asyncio.sleep(0.2)
        return still_scanning, controller.is_scanning

    still_scanning, finally_scanning = asyncio.run(_run())

    assert still_scanning is True
    assert finally_scanning is False


def test_scan_failure_posts_notice_and_returns_to_idle():
    async def _run():
        controller, _stack, _registry, notices = _controller(fail_scan=True)
        started = await controller.start_scan()
        return started, controller.is_scanning, notices.drain()

    started, scanning, notices = asyncio.run(_run())

    assert started is False
    assert scanning is False
    assert len(notices) == 1
    assert notices[0].level == NoticeLevel.ERROR
    assert notices[0].error == ErrorKind.SCAN_FAILED


def test_fresh_scan_resets_registry():
    async def _run(fresh: bool):
        controller, _stack, registry, _notices = _controller(duration=1.0)
        registry.upsert_discovered("A", "Speaker", -40)
        registry.upsert_discovered("B", "Watch", -60)
        registry.mark_connected("B")
        await controller.start_scan(fresh=fresh)
        controller.close()
        return [device.id for device in registry.list()], registry.connected_ids()

    assert asyncio.run(_run(True)) == (["B"], ["B"])
    assert asyncio.run(_run(False)) == (["A", "B"], ["B"])


def test_scan_started_event_activates_idle_controller():
    async def _run():
        controller, _stack, _registry, _notices = _controller(duration=0.05)
        controller.on_scan_started()
        active = controller.is_scanning
        await asyncio.sleep(0.15)
        return active, controller.is_scanning

    assert asyncio.run(_run()) == (True, False)


def test_force_idle():
    async def _run():
        controller, _stack, _registry, _notices = _controller(duration=5.0)
        await controller.start_scan()
        controller.force_idle()
        return controller.session

    session = asyncio.run(_run())
    assert session.active is False
