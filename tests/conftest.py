"""Root conftest — shared fakes for the prlctl boundary.

Invariants:
    - No test ever spawns the real prlctl: handlers get FakeExecutor
    - Settings never pick up a developer's .env audit database
"""

import os

import pytest

from parallels_bridge.core.repository_protocols import PrlctlOutput
from parallels_bridge.services.tool_dispatch import build_dispatcher

os.environ.setdefault(
    "PARALLELS_BRIDGE_DATABASE_URL", "sqlite+aiosqlite:///:memory:",
)


class FakeExecutor:
    """Records argv and replays canned responses.

    Responses are matched by argv prefix (and optionally a substring of any
    argv element); the most recently registered match wins.
    """

    def __init__(self):
        self.calls: list[list[str]] = []
        self._responses: list[tuple[tuple[str, ...], str | None, dict]] = []

    def on(
        self,
        *prefix: str,
        stdout: str = "",
        stderr: str = "",
        error: Exception | None = None,
        containing: str | None = None,
        side_effect=None,
    ) -> "FakeExecutor":
        self._responses.append((prefix, containing, {
            "stdout": stdout, "stderr": stderr, "error": error, "side_effect": side_effect,
        }))
        return self

    async def execute(self, argv: list[str]) -> PrlctlOutput:
        self.calls.append(list(argv))
        for prefix, containing, response in reversed(self._responses):
            if tuple(argv[: len(prefix)]) != prefix:
                continue
            if containing is not None and not any(containing in part for part in argv):
                continue
            if response["side_effect"] is not None:
                response["side_effect"](argv)
            if response["error"] is not None:
                raise response["error"]
            return PrlctlOutput(stdout=response["stdout"], stderr=response["stderr"])
        return PrlctlOutput(stdout="", stderr="")

    def subcommands(self) -> list[str]:
        return [argv[0] for argv in self.calls]


@pytest.fixture
def fake_executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def ssh_dir(tmp_path):
    path = tmp_path / ".ssh"
    path.mkdir()
    return path


@pytest.fixture
def dispatcher(fake_executor, tmp_path, ssh_dir):
    return build_dispatcher(
        fake_executor,
        screenshot_dir=str(tmp_path / "shots"),
        ssh_dir=ssh_dir,
        boot_wait_seconds=0,
    )
