"""prlctl Executor — real subprocesses standing in for prlctl.

Tests:
    - argv reaches the binary unchanged (no shell expansion)
    - Non-zero exit → PrlctlExecutionError with exit code, stdout, stderr
    - Missing binary → PRLCTL_NOT_FOUND
    - NUL byte in an argument → PRLCTL_INVALID_ARGUMENT, nothing spawned
    - Timeout → CommandTimeoutError
    - Output truncated to max_output_bytes

Design Decisions:
    - Standard POSIX tools (echo, sh, sleep) play the controller binary
"""

import pytest

from parallels_bridge.core.errors import CommandTimeoutError, PrlctlExecutionError
from parallels_bridge.infrastructure.prlctl_executor import PrlctlExecutor


@pytest.mark.asyncio
async def test_success_returns_stdout():
    output = await PrlctlExecutor(binary="echo").execute(["list", "$HOME;", "--all"])
    assert output.stdout == "list $HOME; --all\n"
    assert output.stderr == ""


@pytest.mark.asyncio
async def test_non_zero_exit():
    executor = PrlctlExecutor(binary="sh")
    with pytest.raises(PrlctlExecutionError) as exc:
        await executor.execute(["-c", "echo partial; echo oops >&2; exit 3"])
    error = exc.value
    assert error.exit_code == 3
    assert error.stdout == "partial\n"
    assert error.stderr == "oops\n"
    assert error.message.startswith("prlctl command failed: exit status 3")
    assert "stderr: oops" in error.message
    assert error.context.argv[0] == "-c"


@pytest.mark.asyncio
async def test_missing_binary():
    executor = PrlctlExecutor(binary="/nonexistent/prlctl-binary")
    with pytest.raises(PrlctlExecutionError) as exc:
        await executor.execute(["list"])
    assert exc.value.code == "PRLCTL_NOT_FOUND"
    assert exc.value.exit_code is None
    assert "not found" in exc.value.message


@pytest.mark.asyncio
async def test_timeout_kills_process():
    executor = PrlctlExecutor(binary="sleep", timeout_seconds=0.2)
    with pytest.raises(CommandTimeoutError) as exc:
        await executor.execute(["5"])
    assert exc.value.code == "PRLCTL_TIMEOUT"
    assert exc.value.timeout_seconds == 0.2


@pytest.mark.asyncio
async def test_output_truncated():
    executor = PrlctlExecutor(binary="echo", max_output_bytes=5)
    output = await executor.execute(["abcdefghij"])
    assert output.stdout == "abcde"


@pytest.mark.asyncio
async def test_invalid_utf8_replaced():
    executor = PrlctlExecutor(binary="printf")
    output = await executor.execute(["ok\\377"])
    assert output.stdout.startswith("ok")
    assert "�" in output.stdout


@pytest.mark.asyncio
async def test_nul_byte_in_argv_is_an_execution_error():
    executor = PrlctlExecutor(binary="echo")
    with pytest.raises(PrlctlExecutionError) as exc:
        await executor.execute(["snapshot", "vm1", "--name", "a\x00b"])
    assert exc.value.code == "PRLCTL_INVALID_ARGUMENT"
    assert exc.value.exit_code is None
    assert exc.value.context.argv == ["snapshot", "vm1", "--name", "a\x00b"]
