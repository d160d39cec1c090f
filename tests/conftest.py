import asyncio
import threading
from typing import Any, Dict, Optional, Tuple

import aiohttp
import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer, unused_port


STATUS_DOC = {
    "state": "running",
    "next_run": 42.5,
    "next_tasks": [
        {"task_id": "backup", "name": "backup", "enabled": True, "timeout": "600"},
        {"task_id": "cleanup", "name": "cleanup", "enabled": True, "timeout": "60"},
    ],
    "planned_task_run_uuids": ["2f1c7c3e", "9b0d11aa"],
}

TASKS_DOC = [
    {
        "task_id": "backup",
        "name": "backup",
        "cmd": "/usr/local/bin/backup.sh",
        "cron_schedule": "0 3 * * *",
        "description": "Nightly backup",
        "enabled": True,
        "group": "ops",
        "shell_scripts": [],
        "timeout": "600",
        "try_more_on_error": False,
        "stats": {
            "task_id": "backup",
            "success": 10,
            "error": 4,
            "duration_avg": 12.5,
            "duration_max": 30,
            "duration_min": 5,
            "exit_codes": ["1", "0", "2", "3"],
        },
    },
    {
        "task_id": "cleanup",
        "name": "cleanup",
        "enabled": False,
        "timeout": "never",
        "stats": {
            "task_id": "cleanup",
            "success": 0,
            "error": 0,
            "duration_avg": 0,
            "duration_max": 0,
            "duration_min": 0,
            "exit_codes": [],
        },
    },
]


def make_ereb_app(
    status: Any = None,
    tasks: Any = None,
    status_code: int = 200,
    tasks_code: int = 200,
    delay: float = 0.0,
    credentials: Optional[Tuple[str, str]] = None,
    raw_body: Optional[str] = None,
) -> web.Application:
    """Fake ereb server answering /status and /tasks."""
    status = STATUS_DOC if status is None else status
    tasks = TASKS_DOC if tasks is None else tasks
    hits: Dict[str, int] = {"status": 0, "tasks": 0}

    def authorized(request: web.Request) -> bool:
        if credentials is None:
            return True
        expected = aiohttp.BasicAuth(*credentials).encode()
        return request.headers.get("Authorization") == expected

    def make_handler(name: str, document: Any, code: int):
        async def handler(request: web.Request) -> web.Response:
            hits[name] += 1
            if delay:
                await asyncio.sleep(delay)
            if not authorized(request):
                return web.Response(status=401)
            if code != 200:
                return web.Response(status=code, text="failure")
            if raw_body is not None:
                return web.Response(text=raw_body, content_type="application/json")
            return web.json_response(document)

        return handler

    app = web.Application()
    app["hits"] = hits
    app.router.add_get("/status", make_handler("status", status, status_code))
    app.router.add_get("/tasks", make_handler("tasks", tasks, tasks_code))
    return app


@pytest_asyncio.fixture
async def ereb_server():
    """Factory starting fake ereb servers; returns (base_url, app)."""
    servers = []

    async def start(**kwargs) -> Tuple[str, web.Application]:
        app = make_ereb_app(**kwargs)
        server = TestServer(app)
        await server.start_server()
        servers.append(server)
        return f"http://{server.host}:{server.port}", app

    yield start

    for server in servers:
        await server.close()


@pytest.fixture
def threaded_ereb_server():
    """Fake ereb server on its own thread and event loop; returns (base_url, app).

    For tests that drive their own event loops with asyncio.run.
    """
    loop = asyncio.new_event_loop()
    app = make_ereb_app()
    runner = web.AppRunner(app)
    port = unused_port()
    loop.run_until_complete(runner.setup())
    loop.run_until_complete(web.TCPSite(runner, "127.0.0.1", port).start())

    thread = threading.Thread(target=loop.run_forever, daemon=True)
    thread.start()

    yield f"http://127.0.0.1:{port}", app

    asyncio.run_coroutine_threadsafe(runner.cleanup(), loop).result(timeout=5)
    loop.call_soon_threadsafe(loop.stop)
    thread.join(timeout=5)
    loop.close()


@pytest.fixture
def tasks_doc():
    return TASKS_DOC


@pytest.fixture
def status_doc():
    return STATUS_DOC
