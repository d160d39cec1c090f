import asyncio
import logging
import time
from unittest.mock import AsyncMock, patch

import pytest
from aiohttp.test_utils import unused_port

from ereb_monitor.collector import (
    CollectorConfig,
    CollectorNotFoundError,
    ErebCollector,
    MetricAccumulator,
    get_collector,
)
from ereb_monitor.endpoints import DEFAULT_SERVER, host_tag, normalize_endpoints
from ereb_monitor.extractors import STATUS_MEASUREMENT, TASKS_MEASUREMENT
from ereb_monitor.fetcher import EndpointConnectionError, HTTPStatusError


def hostname(url):
    return url.replace("http://", "")


def test_normalize_endpoints_defaults_to_local_server():
    assert normalize_endpoints([]) == [DEFAULT_SERVER]
    assert normalize_endpoints(None) == ["http://localhost:8888"]


def test_normalize_endpoints():
    servers = ["http://host:8888/", "http://other:8888", "host:8888", "https://secure/"]
    assert normalize_endpoints(servers) == [
        "http://host:8888",
        "http://other:8888",
        "https://secure",
    ]


def test_trailing_slash_is_irrelevant():
    assert normalize_endpoints(["http://host:8888/"]) == normalize_endpoints(["http://host:8888"])


def test_only_invalid_servers_leaves_nothing_to_collect():
    assert normalize_endpoints(["host:8888", "ftp://host"]) == []


@pytest.mark.parametrize(
    "endpoint,expected",
    [
        ("http://host:8888", "host:8888"),
        ("http://host", "host"),
        ("http://user:pw@host:8888", "host:8888"),
        ("https://[::1]:8443", "[::1]:8443"),
    ],
)
def test_host_tag(endpoint, expected):
    assert host_tag(endpoint) == expected


def test_collector_needs_no_arguments():
    collector = ErebCollector()
    assert collector.endpoints() == [DEFAULT_SERVER]
    assert collector.config.request_timeout == 30.0
    assert "servers" in collector.sample_config()
    assert collector.description()


def test_registry():
    collector = get_collector("ereb")
    assert isinstance(collector, ErebCollector)

    with pytest.raises(CollectorNotFoundError):
        get_collector("nagios")


def test_config_from_env():
    config = CollectorConfig.from_env(
        {
            "EREB_SERVERS": "http://a:8888, http://b:8888/",
            "EREB_VERBOSE": "true",
            "EREB_REQUEST_TIMEOUT": "4",
            "EREB_RESPONSE_HEADER_TIMEOUT": "3",
        }
    )
    assert config.servers == ["http://a:8888", "http://b:8888/"]
    assert config.verbose is True
    assert config.request_timeout == 4.0
    assert config.response_header_timeout == 3.0
    assert config.interval == 10.0
    assert config.use_ray is False


@pytest.mark.asyncio
async def test_gather_single_endpoint(ereb_server):
    url, _ = await ereb_server()
    acc = MetricAccumulator()
    async with ErebCollector(CollectorConfig(servers=[url + "/"])) as collector:
        await collector.gather(acc)

    assert acc.errors == []
    assert len(acc.get_records(STATUS_MEASUREMENT)) == 1
    assert len(acc.get_records(TASKS_MEASUREMENT)) == 2


@pytest.mark.asyncio
async def test_failing_endpoint_is_isolated(ereb_server):
    """Test one endpoint failing on /tasks does not affect the others"""
    healthy_a, _ = await ereb_server()
    healthy_b, _ = await ereb_server()
    broken, _ = await ereb_server(tasks_code=500)

    acc = MetricAccumulator()
    async with ErebCollector(CollectorConfig(servers=[healthy_a, broken, healthy_b])) as collector:
        await collector.gather(acc)

    status_hosts = {r.tags["hostname"] for r in acc.get_records(STATUS_MEASUREMENT)}
    task_hosts = {r.tags["hostname"] for r in acc.get_records(TASKS_MEASUREMENT)}

    assert status_hosts == {hostname(healthy_a), hostname(healthy_b), hostname(broken)}
    assert task_hosts == {hostname(healthy_a), hostname(healthy_b)}
    assert len(acc.get_records(TASKS_MEASUREMENT)) == 4

    assert len(acc.errors) == 1
    assert isinstance(acc.errors[0], HTTPStatusError)
    assert acc.errors[0].status == 500


@pytest.mark.asyncio
async def test_all_endpoints_down():
    """Test a cycle with no reachable server reports errors and no metrics"""
    servers = [f"http://127.0.0.1:{unused_port()}", f"http://127.0.0.1:{unused_port()}"]
    acc = MetricAccumulator()
    async with ErebCollector(CollectorConfig(servers=servers)) as collector:
        await collector.gather(acc)

    assert acc.records == []
    assert len(acc.errors) == 4
    assert all(isinstance(e, EndpointConnectionError) for e in acc.errors)

    details = acc.get_error_details()
    assert {d["error_type"] for d in details} == {"EndpointConnectionError"}
    assert all(d["url"].startswith("http://127.0.0.1:") for d in details)


@pytest.mark.asyncio
async def test_units_run_in_parallel(ereb_server):
    """Test a cycle takes about one slow request, not the sum of them"""
    delay = 0.5
    servers = [(await ereb_server(delay=delay))[0] for _ in range(3)]

    acc = MetricAccumulator()
    async with ErebCollector(CollectorConfig(servers=servers)) as collector:
        start = time.monotonic()
        await collector.gather(acc)
        elapsed = time.monotonic() - start

    assert acc.errors == []
    assert len(acc.get_records(STATUS_MEASUREMENT)) == 3
    # six units of 0.5s each would take 3s sequentially
    assert elapsed < 2 * delay


@pytest.mark.asyncio
async def test_session_reused_across_cycles(ereb_server):
    url, app = await ereb_server()
    collector = ErebCollector(CollectorConfig(servers=[url]))
    try:
        await collector.gather(MetricAccumulator())
        session = collector.client._session
        await collector.gather(MetricAccumulator())
        assert collector.client._session is session
    finally:
        await collector.close()

    assert app["hits"] == {"status": 2, "tasks": 2}


@pytest.mark.asyncio
async def test_errors_echoed_to_debug_log_when_verbose(caplog):
    caplog.set_level(logging.DEBUG, logger="ereb_monitor.collector")
    server = f"http://127.0.0.1:{unused_port()}"

    async with ErebCollector(CollectorConfig(servers=[server], verbose=True)) as collector:
        await collector.gather(MetricAccumulator())
    assert "Unable to connect to ereb server" in caplog.text

    caplog.clear()
    async with ErebCollector(CollectorConfig(servers=[server])) as collector:
        await collector.gather(MetricAccumulator())
    assert "Unable to connect to ereb server" not in caplog.text


@pytest.mark.asyncio
async def test_records_emitted_as_units_finish(ereb_server):
    """Test a fast endpoint's records reach the sink before a slow one answers"""
    fast, _ = await ereb_server()
    slow, _ = await ereb_server(delay=0.5)

    acc = MetricAccumulator()
    async with ErebCollector(CollectorConfig(servers=[fast, slow])) as collector:
        cycle = asyncio.create_task(collector.gather(acc))
        await asyncio.sleep(0.25)

        assert not cycle.done()
        assert len(acc.records) == 3
        assert {r.tags["hostname"] for r in acc.records} == {hostname(fast)}

        await cycle

    assert acc.errors == []
    assert len(acc.records) == 6


@pytest.mark.asyncio
async def test_unexpected_error_in_one_unit_is_isolated(ereb_server):
    url, _ = await ereb_server()
    acc = MetricAccumulator()

    failing_status = AsyncMock(side_effect=RuntimeError("boom"))
    with patch("ereb_monitor.collector.coordinator.extract_status", failing_status):
        async with ErebCollector(CollectorConfig(servers=[url])) as collector:
            await collector.gather(acc)

    assert acc.get_records(STATUS_MEASUREMENT) == []
    assert len(acc.get_records(TASKS_MEASUREMENT)) == 2
    assert len(acc.errors) == 1
    assert isinstance(acc.errors[0], RuntimeError)
    assert acc.get_error_details()[0]["error_type"] == "RuntimeError"


def test_gather_in_a_new_event_loop_each_cycle(threaded_ereb_server):
    """Test a host may run every cycle with its own asyncio.run"""
    url, app = threaded_ereb_server
    collector = ErebCollector(CollectorConfig(servers=[url]))

    for _ in range(2):
        acc = MetricAccumulator()
        asyncio.run(collector.gather(acc))

        assert acc.errors == []
        assert len(acc.get_records(STATUS_MEASUREMENT)) == 1
        assert len(acc.get_records(TASKS_MEASUREMENT)) == 2

    assert app["hits"] == {"status": 2, "tasks": 2}
