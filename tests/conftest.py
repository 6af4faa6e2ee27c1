import os
import sys
import time
import socket
import subprocess
from contextlib import closing
from pathlib import Path

import httpx
import pytest

from reporting_client import ReportServiceClient

SERVICE_URL = "http://tank.example.com:8080"
TESTS_DIR = Path(__file__).parent


class FakeReportService:
    """Records requests sent through an httpx.MockTransport and answers
    each with a canned status and body."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.body = b""
        self.error: Exception | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, content=self.body)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def service():
    return FakeReportService()


@pytest.fixture
def client(service):
    with ReportServiceClient(SERVICE_URL, transport=httpx.MockTransport(service.handler)) as client:
        yield client


def _wait_for_port(host: str, port: int, timeout: float = 10.0) -> bool:
    """Wait until a TCP port is accepting connections or timeout."""
    end = time.time() + timeout
    while time.time() < end:
        try:
            with closing(socket.create_connection((host, port), timeout=0.5)):
                return True
        except OSError:
            time.sleep(0.1)
    return False


@pytest.fixture(scope="session")
def api_server():
    """
    Start the reporting service stub from `report_stub:app` in a subprocess
    using uvicorn.

    Yields the service URL (e.g. http://127.0.0.1:8787) to run tests against.
    """
    host = os.environ.get("API_HOST", "127.0.0.1")
    port = int(os.environ.get("API_PORT", "8787"))

    python = sys.executable
    cmd = [
        python, "-m", "uvicorn", "report_stub:app",
        "--app-dir", str(TESTS_DIR),
        "--host", host, "--port", str(port), "--log-level", "warning",
    ]

    proc = subprocess.Popen(
        cmd,
        cwd=os.getcwd(),
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        env=os.environ.copy(),
    )

    started = _wait_for_port(host, port, timeout=15.0)
    if not started:
        try:
            out, err = proc.communicate(timeout=1.0)
        except subprocess.TimeoutExpired:
            proc.kill()
            out, err = b"", b""
        raise RuntimeError(f"Stub service failed to start (port {port} not open). stdout:\n{out.decode(errors='ignore')}\nstderr:\n{err.decode(errors='ignore')}")

    try:
        yield f"http://{host}:{port}"
    finally:
        proc.terminate()
        try:
            proc.wait(timeout=5.0)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.wait()


@pytest.fixture
def live_client(api_server):
    with ReportServiceClient(api_server, timeout=10.0) as client:
        yield client
