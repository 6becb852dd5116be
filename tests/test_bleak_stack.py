from __future__ import annotations

import asyncio
from types import SimpleNamespace

import pytest
from bleak.exc import BleakError

from blepanel.errors import BleStackError
from blepanel.models import (
    PeripheralConnected,
    PeripheralDisconnected,
    PeripheralDiscovered,
    ScanStarted,
    ScanStopped,
)
from blepanel.stack import bleak_stack as stack_module
from blepanel.stack.bleak_stack import BleakStack

SERVICE = "0000180f-0000-1000-8000-00805f9b34fb"


class DummyScanner:
    fail_start = False

    def __init__(self, detection_callback=None, service_uuids=None) -> None:
        self.detection_callback = detection_callback
        self.service_uuids = service_uuids
        self.started = False
        self.stopped = False

    async def start(self) -> None:
        if self.fail_start:
            raise BleakError("Bluetooth adapter is powered off")
        self.started = True

    async def stop(self) -> None:
        self.stopped = True


class DummyClient:
    fail_connect = False
    hang_connect = False

    def __init__(self, address_or_device, disconnected_callback=None) -> None:
        self.address = getattr(address_or_device, "address", address_or_device)
        self.target = address_or_device
        self._disconnected_callback = disconnected_callback
        self.is_connected = False
        self.disconnect_calls = 0
        self.services = [SimpleNamespace(uuid=SERVICE)]

    async def connect(self) -> None:
        if self.hang_connect:
            await asyncio.sleep(10)
        if self.fail_connect:
            raise BleakError("Device not found")
        self.is_connected = True

    async def disconnect(self) -> None:
        self.disconnect_calls += 1
        self.is_connected = False
        if self._disconnected_callback is not None:
            self._disconnected_callback(self)


@pytest.fixture
def fakes(monkeypatch: pytest.MonkeyPatch):
    scanners: list[DummyScanner] = []
    clients: list[DummyClient] = []

    def _scanner(**kwargs) -> DummyScanner:
        scanner = DummyScanner(**kwargs)
        scanners.append(scanner)
        return scanner

    def _client(target, disconnected_callback=None) -> DummyClient:
        client = DummyClient(target, disconnected_callback)
        clients.append(client)
        return client

    monkeypatch.setattr(stack_module.bleak, "BleakScanner", _scanner)
    monkeypatch.setattr(stack_module.bleak, "BleakClient", _client)
    return SimpleNamespace(scanners=scanners, clients=clients)


def _recording_stack() -> tuple[BleakStack, list[object]]:
    stack = BleakStack()
    events: list[object] = []
    for event_type in (
        PeripheralDiscovered,
        ScanStarted,
        ScanStopped,
        PeripheralConnected,
        PeripheralDisconnected,
    ):
        stack.add_listener(event_type, events.append)
    return stack, events


def _advertise(scanner: DummyScanner, address: str, name, local_name, rssi: int):
    device = SimpleNamespace(address=address, name=name)
    adv = SimpleNamespace(local_name=local_name, rssi=rssi)
    scanner.detection_callback(device, adv)


def test_scan_translates_advertisements(fakes):
    async def _run():
        stack, events = _recording_stack()
        await stack.scan(["180d"], 0.05, True)
        scanner = fakes.scanners[0]
        _advertise(scanner, "AA:BB:CC:DD:EE:01", "fallback", "Speaker", -40)
        _advertise(scanner, "AA:BB:CC:DD:EE:02", "Watch", None, -70)
        _advertise(scanner, "AA:BB:CC:DD:EE:01", "fallback", "Speaker", -45)
        await asyncio.sleep(0.1)
        return scanner, events

    scanner, events = asyncio.run(_run())

    assert scanner.service_uuids == ["180d"]
    assert scanner.started is True
    assert scanner.stopped is True
    assert events == [
        ScanStarted(),
        PeripheralDiscovered(id="AA:BB:CC:DD:EE:01", name="Speaker", rssi=-40),
        PeripheralDiscovered(id="AA:BB:CC:DD:EE:02", name="Watch", rssi=-70),
        PeripheralDiscovered(id="AA:BB:CC:DD:EE:01", name="Speaker", rssi=-45),
        ScanStopped(),
    ]


def test_scan_without_duplicates(fakes):
    async def _run():
        stack, events = _recording_stack()
        await stack.scan([], 5.0, False)
        scanner = fakes.scanners[0]
        _advertise(scanner, "AA:BB:CC:DD:EE:01", None, "Speaker", -40)
        _advertise(scanner, "AA:BB:CC:DD:EE:01", None, "Speaker", -45)
        await stack.close()
        return scanner, events

    scanner, events = asyncio.run(_run())

    assert scanner.service_uuids is None
    discovered = [e for e in events if isinstance(e, PeripheralDiscovered)]
    assert len(discovered) == 1
    assert events[-1] == ScanStopped()


def test_scan_start_failure_is_wrapped(fakes, monkeypatch):
    monkeypatch.setattr(DummyScanner, "fail_start", True)

    async def _run():
        stack, events = _recording_stack()
        with pytest.raises(BleStackError):
            await stack.scan([], 1.0, True)
        return events

    assert asyncio.run(_run()) == []


def test_connect_and_disconnect_emit_events(fakes):
    async def _run():
        stack, events = _recording_stack()
        await stack.scan([], 5.0, True)
        _advertise(fakes.scanners[0], "AA:BB:CC:DD:EE:01", None, "Speaker", -40)
        await stack.connect("AA:BB:CC:DD:EE:01")
        services = await stack.retrieve_services("AA:BB:CC:DD:EE:01")
        await stack.disconnect("AA:BB:CC:DD:EE:01")
        await stack.close()
        return events, services

    events, services = asyncio.run(_run())

    assert services == [SERVICE]
    assert PeripheralConnected(id="AA:BB:CC:DD:EE:01") in events
    assert PeripheralDisconnected(id="AA:BB:CC:DD:EE:01") in events
    # built from the advertised device rather than the bare address
    assert isinstance(fakes.clients[0].target, SimpleNamespace)


def test_connect_failure_is_wrapped(fakes, monkeypatch):
    monkeypatch.setattr(DummyClient, "fail_connect", True)

    async def _run():
        stack, events = _recording_stack()
        with pytest.raises(BleStackError):
            await stack.connect("AA:BB:CC:DD:EE:01")
        return events

    assert asyncio.run(_run()) == []
    assert fakes.clients[0].disconnect_calls == 1


def test_cancelled_connect_drops_client(fakes, monkeypatch):
    monkeypatch.setattr(DummyClient, "hang_connect", True)

    async def _run():
        stack, events = _recording_stack()
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(stack.connect("AA:BB:CC:DD:EE:01"), 0.05)
        with pytest.raises(BleStackError):
            await stack.retrieve_services("AA:BB:CC:DD:EE:01")
        return events

    assert asyncio.run(_run()) == []
    assert fakes.clients[0].disconnect_calls == 1


def test_disconnect_without_connection_fails(fakes):
    async def _run():
        stack, _events = _recording_stack()
        with pytest.raises(BleStackError):
            await stack.disconnect("AA:BB:CC:DD:EE:01")
        with pytest.raises(BleStackError):
            await stack.retrieve_services("AA:BB:CC:DD:EE:01")

    asyncio.run(_run())


def test_close_disconnects_clients(fakes):
    async def _run():
        stack, events = _recording_stack()
        await stack.connect("AA:BB:CC:DD:EE:01")
        await stack.close()
        return events

    events = asyncio.run(_run())

    assert fakes.clients[0].is_connected is False
    assert events[-1] == PeripheralDisconnected(id="AA:BB:CC:DD:EE:01")
