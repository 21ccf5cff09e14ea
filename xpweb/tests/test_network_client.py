import asyncio
import json
import logging

import pytest

from xpweb.cache import EntityCache
from xpweb.config import ClientSettings
from xpweb.errors import NotConnected, TransportClosed
from xpweb.models import Command, Dataref, DatarefRef, ValueType
from xpweb.network.client import WsClient
from xpweb.network.transport.dummy import DummyTransport


async def _wait_for(predicate, *, timeout: float = 1.0, interval: float = 0.005) -> bool:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while loop.time() < deadline:
        if predicate():
            return True
        await asyncio.sleep(interval)
    return predicate()


class _Factory:
    def __init__(self) -> None:
        self.transports: list[DummyTransport] = []

    def __call__(self, settings: ClientSettings) -> DummyTransport:
        transport = DummyTransport(settings)
        self.transports.append(transport)
        return transport

    @property
    def current(self) -> DummyTransport:
        return self.transports[-1]


@pytest.fixture
def factory() -> _Factory:
    return _Factory()


@pytest.fixture
def client(factory) -> WsClient:
    settings = ClientSettings(reconnect_interval_seconds=0.01)
    commands: EntityCache[Command] = EntityCache("command")
    commands.reload([Command(id=7, name="sim/operation/pause_toggle", description="Pause")])
    datarefs: EntityCache[Dataref] = EntityCache("dataref")
    datarefs.reload(
        [
            Dataref(id=42, name="sim/cockpit/autopilot/heading", value_type=ValueType.FLOAT),
            Dataref(id=43, name="sim/aircraft/view/acf_ui_name", value_type=ValueType.DATA),
        ]
    )
    return WsClient(settings=settings, transport_factory=factory, commands=commands, datarefs=datarefs)


@pytest.mark.asyncio
async def test_request_ids_start_at_one_and_increase(client):
    ids = [client.new_request().req_id for _ in range(3)]
    assert ids == [1, 2, 3]


@pytest.mark.asyncio
async def test_send_writes_frame_and_records_request(client, factory):
    await client.connect()
    try:
        request = client.new_request().command_set_is_active(
            client.command("sim/operation/pause_toggle", True).with_duration(0),
        )
        await request.send()

        assert factory.current.sent_frames() == [
            {
                "req_id": 1,
                "type": "command_set_is_active",
                "params": {"commands": [{"id": 7, "is_active": True, "duration": 0}]},
            }
        ]
        assert client.ledger.get(1) is request
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_subscribe_resolves_names_and_unknowns_to_zero(client, factory):
    await client.connect()
    try:
        await client.new_request().command_subscribe("sim/operation/pause_toggle", "sim/none", 12).send()
        await client.new_request().dataref_subscribe(
            client.dataref("sim/cockpit/autopilot/heading"),
            DatarefRef(id=99).with_index([0, 2]),
        ).send()
        await client.new_request().dataref_unsubscribe_all().send()

        frames = factory.current.sent_frames()
        assert frames[0]["params"] == {"commands": [{"id": 7}, {"id": 0}, {"id": 12}]}
        assert frames[1]["type"] == "dataref_subscribe_values"
        assert frames[1]["params"] == {"datarefs": [{"id": 42}, {"id": 99, "index": [0, 2]}]}
        assert frames[2] == {"req_id": 3, "type": "dataref_unsubscribe_values", "params": {"datarefs": "all"}}
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_dataref_set_frame(client, factory):
    await client.connect()
    try:
        await client.new_request().dataref_set(
            client.dataref_value("sim/cockpit/autopilot/heading", 270.0),
            client.dataref_value("sim/cockpit/autopilot/heading", 1).with_index(3),
        ).send()

        (frame,) = factory.current.sent_frames()
        assert frame["type"] == "dataref_set_values"
        assert frame["params"] == {
            "datarefs": [{"id": 42, "value": 270.0}, {"id": 42, "value": 1, "index": 3}],
        }
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_send_without_connection_keeps_ledger_entry(client):
    request = client.new_request().command_unsubscribe_all()

    with pytest.raises(NotConnected):
        await request.send()

    assert request.req_id in client.ledger


@pytest.mark.asyncio
async def test_result_carries_originating_request(client, factory):
    results = []
    client.on_result = results.append
    await client.connect()
    try:
        request = client.new_request().command_subscribe("sim/operation/pause_toggle")
        await request.send()
        factory.current.feed({"type": "result", "req_id": 1, "success": True})

        assert await _wait_for(lambda: len(results) == 1)
        assert results[0].success is True
        assert results[0].request is request
        assert 1 not in client.ledger
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_result_for_unknown_request_has_no_context(client, factory):
    results = []

    async def on_result(message):
        results.append(message)

    client.on_result = on_result
    await client.connect()
    try:
        factory.current.feed(
            {
                "type": "result",
                "req_id": 55,
                "success": False,
                "error_code": "invalid_id",
                "error_message": "no such dataref",
            }
        )

        assert await _wait_for(lambda: len(results) == 1)
        assert results[0].request is None
        assert results[0].error_code == "invalid_id"
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_dataref_updates_are_enriched_from_cache(client, factory):
    updates = []
    client.on_dataref_update = updates.append
    await client.connect()
    try:
        factory.current.feed(
            {
                "type": "dataref_update_values",
                "data": {"42": 3.14, "43": "Q2Vzc25hIFNreWhhd2s=", "1000": 5},
            }
        )

        assert await _wait_for(lambda: len(updates) == 1)
        data = updates[0].data
        assert data[42].dataref.name == "sim/cockpit/autopilot/heading"
        assert data[42].value_type is ValueType.FLOAT
        assert data[42].as_float() == pytest.approx(3.14)
        assert data[43].as_str() == "Cessna Skyhawk"
        assert data[1000].dataref is None
        assert data[1000].value_type is None
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_command_updates_are_enriched_from_cache(client, factory):
    updates = []
    client.on_command_update = updates.append
    await client.connect()
    try:
        factory.current.feed({"type": "command_update_is_active", "data": {"7": True, "8": False}})

        assert await _wait_for(lambda: len(updates) == 1)
        data = updates[0].data
        assert data[7].is_active is True
        assert data[7].command.name == "sim/operation/pause_toggle"
        assert data[8].is_active is False
        assert data[8].command is None
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_undecodable_frame_is_logged_and_skipped(client, factory, caplog):
    results = []
    client.on_result = results.append
    caplog.set_level(logging.WARNING, logger="xpweb.network.client")
    await client.connect()
    try:
        factory.current.feed(json.dumps({"type": "bogus"}))
        factory.current.feed("not json at all")
        factory.current.feed({"type": "result", "req_id": 9, "success": True})

        assert await _wait_for(lambda: len(results) == 1)
        assert results[0].req_id == 9
        messages = [record.getMessage() for record in caplog.records]
        assert any("unknown message type: bogus" in message for message in messages)
        assert sum("Failed to decode incoming message" in message for message in messages) == 2
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_messages_without_handler_are_dropped(client, factory):
    await client.connect()
    try:
        factory.current.feed({"type": "command_update_is_active", "data": {"7": True}})
        factory.current.feed({"type": "result", "req_id": 1, "success": True})
        await asyncio.sleep(0.02)
        assert client.connected
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_updates_resume_after_reconnect(client, factory):
    updates = []
    client.on_command_update = updates.append
    await client.connect()
    try:
        factory.current.fail(TransportClosed("connection reset by peer"))
        assert await _wait_for(lambda: len(factory.transports) == 2 and client.connected)

        factory.current.feed({"type": "command_update_is_active", "data": {"7": True}})
        assert await _wait_for(lambda: len(updates) == 1)
    finally:
        await client.close()
