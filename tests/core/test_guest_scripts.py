"""Guest Scripts — shell snippets run inside VMs via `prlctl exec`.

Tests:
    - POSIX username shape enforced
    - Every interpolated value quoted; hostile key text stays inside quotes
    - Optional steps (useradd, sudoers) only when requested
    - first_ipv4 extracts the first dotted quad
    - hosts-file command replaces or appends the 127.0.1.1 entry
"""

import shlex

import pytest

from parallels_bridge.core.guest_scripts import (
    IP_REPORT_COMMAND,
    build_ssh_setup_script,
    first_ipv4,
    hostname_file_command,
    hostnamectl_command,
    hosts_file_command,
    is_valid_username,
    runtime_hostname_command,
)


@pytest.mark.parametrize("username", ["dev", "_svc", "build-bot", "a" * 32])
def test_valid_usernames(username):
    assert is_valid_username(username)


@pytest.mark.parametrize("username", ["", "Dev", "1user", "a" * 33, "bad;name", "with space"])
def test_invalid_usernames(username):
    assert not is_valid_username(username)


def test_ssh_script_quotes_public_key():
    key = "ssh-ed25519 AAAA'; rm -rf / #"
    script = build_ssh_setup_script("dev", key)
    assert f"echo {shlex.quote(key)} | sudo tee -a" in script
    assert script.endswith(IP_REPORT_COMMAND)


def test_ssh_script_optional_steps_off_by_default():
    script = build_ssh_setup_script("dev", "ssh-rsa AAAA")
    assert "useradd" not in script
    assert "sudoers" not in script
    assert "sudo -u dev mkdir -p /home/dev/.ssh" in script


def test_ssh_script_optional_steps_on():
    script = build_ssh_setup_script(
        "dev", "ssh-rsa AAAA", passwordless_sudo=True, create_user=True,
    )
    assert "sudo useradd -m -s /bin/bash dev" in script
    assert "/etc/sudoers.d/dev" in script
    assert "'dev ALL=(ALL) NOPASSWD:ALL'" in script
    assert script.index("useradd") < script.index("ssh-keygen")


def test_first_ipv4():
    assert first_ipv4("eth0\n10.211.55.7\n") == "10.211.55.7"
    assert first_ipv4("no address here") is None


def test_hostname_commands_quote_hostname():
    assert hostnamectl_command("dev-box") == "sudo hostnamectl set-hostname dev-box"
    assert hostname_file_command("dev-box") == "echo dev-box | sudo tee /etc/hostname >/dev/null"
    assert runtime_hostname_command("dev-box") == "sudo hostname dev-box"


def test_hosts_file_command_replaces_or_appends():
    command = hosts_file_command("dev-box")
    assert "sudo sed -i" in command
    assert "sudo tee -a /etc/hosts" in command
    assert "dev-box" in command
