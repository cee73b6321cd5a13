"""端到端测试：真实 WebSocket 连接"""

import asyncio

import pytest
from websockets.asyncio.client import connect
from websockets.exceptions import ConnectionClosed

from relay_hub.client import RelayClient
from relay_hub.hub import HubServer, start_hub_server
from relay_hub.protocol import OutboundEvent
from relay_hub.utils import HubConfig

TIMEOUT = 5.0


def local_config(**overrides) -> HubConfig:
    config = HubConfig(host="127.0.0.1", port=0, enable_rich_logging=False)
    config.update(**overrides)
    return config


def collect(client: RelayClient, *events: OutboundEvent) -> "asyncio.Queue":
    """把指定事件收集到队列中，元素为 (事件名, 参数元组)"""
    queue: asyncio.Queue = asyncio.Queue()
    for event in events:
        client.on(event)(lambda *args, _name=event.value: queue.put_nowait((_name, args)))
    return queue


async def next_event(queue: "asyncio.Queue"):
    return await asyncio.wait_for(queue.get(), TIMEOUT)


@pytest.mark.asyncio
async def test_master_client_round_trip():
    server = await start_hub_server(config=local_config())
    url = f"ws://127.0.0.1:{server.bound_port}"

    master = RelayClient(url)
    client = RelayClient(url)
    all_events = list(OutboundEvent)
    master_events = collect(master, *all_events)
    client_events = collect(client, *all_events)

    try:
        await master.connect()
        await master.set_role("master", "10.0.0.1", "Tablet")
        event, args = await next_event(master_events)
        assert event == "masterConnected"
        master_id = args[0]["id"]

        await client.connect()
        event, args = await next_event(master_events)
        assert event == "clientConnected"
        client_id = args[0]["id"]
        assert args[0]["address"] == "127.0.0.1"

        await client.set_role("client", "10.0.0.1", "Phone")
        event, args = await next_event(client_events)
        assert event == "connectedToMaster"
        assert args[0]["id"] == master_id
        assert args[0]["clientDeviceModel"] == "Phone"

        await client.send_data("ping")
        event, args = await next_event(master_events)
        assert event == "forwardData"
        assert args[0] == {"data": "ping", "deviceName": None, "senderId": client_id}

        await master.send_data("pong")
        assert await next_event(client_events) == ("receiveData", ("pong",))
        await asyncio.sleep(0.1)
        assert master_events.empty()

        stats = server.get_stats()
        assert stats["sessions"]["total"] == 2
        assert stats["sessions"]["current_master"] == master_id

        await master.disconnect()
        assert await next_event(client_events) == ("masterDisconnected", ())
    finally:
        await client.disconnect()
        await master.disconnect()
        await server.stop()


@pytest.mark.asyncio
async def test_lone_surrogate_payload_reaches_master():
    server = await start_hub_server(config=local_config())
    url = f"ws://127.0.0.1:{server.bound_port}"

    master = RelayClient(url)
    master_events = collect(master, OutboundEvent.FORWARD_DATA, OutboundEvent.MASTER_CONNECTED)

    try:
        await master.connect()
        await master.set_role("master")
        assert (await next_event(master_events))[0] == "masterConnected"

        async with connect(url) as client:
            await client.send('{"event": "setRole", "args": ["client"]}')
            await asyncio.wait_for(client.recv(), TIMEOUT)

            await client.send('{"event": "sendData", "args": [{"data": "\\ud800"}]}')
            await client.send('{"event": "sendData", "args": [{"data": "ping"}]}')

            event, args = await next_event(master_events)
            assert event == "forwardData"
            assert args[0]["data"] == "\ud800"

            event, args = await next_event(master_events)
            assert args[0]["data"] == "ping"

        assert master.connected
        assert server.get_stats()["sessions"]["current_master"] is not None
    finally:
        await master.disconnect()
        await server.stop()


@pytest.mark.asyncio
async def test_invalid_frame_does_not_close_connection():
    server = await start_hub_server(config=local_config())
    url = f"ws://127.0.0.1:{server.bound_port}"

    try:
        async with connect(url) as websocket:
            await websocket.send("this is not json")
            await websocket.send('{"event": "teleport", "args": []}')
            await websocket.send('{"event": "setRole", "args": ["master", "10.0.0.1", "Tablet"]}')

            raw = await asyncio.wait_for(websocket.recv(), TIMEOUT)
            assert '"masterConnected"' in raw
    finally:
        await server.stop()


@pytest.mark.asyncio
async def test_connection_limit():
    server = await start_hub_server(config=local_config(max_connections=1))
    url = f"ws://127.0.0.1:{server.bound_port}"

    try:
        async with connect(url) as first:
            await first.send('{"event": "setRole", "args": ["master"]}')
            await asyncio.wait_for(first.recv(), TIMEOUT)

            async with connect(url) as second:
                with pytest.raises(ConnectionClosed) as excinfo:
                    await asyncio.wait_for(second.recv(), TIMEOUT)
                assert excinfo.value.rcvd.code == 1013

        assert server.get_stats()["server"]["max_connections"] == 1
    finally:
        await server.stop()


def test_explicit_connection_limit_overrides_config():
    assert HubServer(local_config(max_connections=7), max_connections=0).max_connections == 0
    assert HubServer(local_config(max_connections=7)).max_connections == 7
    assert HubServer(local_config(), port=0).get_stats()["server"]["running"] is False


@pytest.mark.asyncio
async def test_zero_connection_limit_rejects_everyone():
    server = await start_hub_server(config=local_config(), max_connections=0)
    url = f"ws://127.0.0.1:{server.bound_port}"

    try:
        async with connect(url) as websocket:
            with pytest.raises(ConnectionClosed) as excinfo:
                await asyncio.wait_for(websocket.recv(), TIMEOUT)
            assert excinfo.value.rcvd.code == 1013
        assert server.get_stats()["sessions"]["total"] == 0
    finally:
        await server.stop()
