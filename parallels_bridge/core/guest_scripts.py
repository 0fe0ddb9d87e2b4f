"""Guest Scripts — shell snippets executed inside a VM via `prlctl exec`.

Invariants:
    - Every interpolated value is shlex.quote()d; prlctl exec hands the script
      to the guest shell, so quoting is the injection boundary here
    - Usernames must pass is_valid_username before any script is built
    - Builders are pure: they return strings, the shell runs them

Design Decisions:
    - One script per tool call joined with "&&": a failing step aborts the rest
      and surfaces as a single PrlctlExecutionError
"""

import re
import shlex


_USERNAME_PATTERN = re.compile(r"[a-z_][a-z0-9_-]{0,31}")
_IPV4_PATTERN = re.compile(r"\b(\d{1,3}(?:\.\d{1,3}){3})\b")

IP_REPORT_COMMAND = (
    "ip -4 addr show | grep -oP '(?<=inet )[\\d.]+(?=/)' | grep -v 127.0.0.1 | head -1"
)


def is_valid_username(username: str) -> bool:
    """POSIX portable username: lowercase, starts with letter/underscore, ≤32 chars."""
    return _USERNAME_PATTERN.fullmatch(username) is not None


def first_ipv4(output: str) -> str | None:
    match = _IPV4_PATTERN.search(output)
    return match.group(1) if match else None


# ─── SSH / user provisioning ─────────────────────────────────────

def build_ssh_setup_script(
    username: str,
    public_key: str,
    *,
    passwordless_sudo: bool = False,
    create_user: bool = False,
) -> str:
    """Enable sshd, install public_key for username, optionally add sudo rule."""
    user = shlex.quote(username)
    ssh_dir = shlex.quote(f"/home/{username}/.ssh")
    auth_keys = shlex.quote(f"/home/{username}/.ssh/authorized_keys")

    commands: list[str] = []
    if create_user:
        commands.append(
            f"(id -u {user} >/dev/null 2>&1 || sudo useradd -m -s /bin/bash {user})"
        )
    commands += [
        "(sudo ssh-keygen -A 2>/dev/null || true)",
        "(sudo systemctl enable ssh 2>/dev/null || sudo systemctl enable sshd 2>/dev/null || true)",
        "(sudo systemctl start ssh 2>/dev/null || sudo systemctl start sshd 2>/dev/null || true)",
        f"sudo -u {user} mkdir -p {ssh_dir}",
        f"sudo chmod 700 {ssh_dir}",
        f"echo {shlex.quote(public_key.strip())} | sudo tee -a {auth_keys} >/dev/null",
        f"sudo chown -R {user}:{user} {ssh_dir}",
        f"sudo chmod 600 {auth_keys}",
    ]
    if passwordless_sudo:
        sudoers = shlex.quote(f"/etc/sudoers.d/{username}")
        rule = shlex.quote(f"{username} ALL=(ALL) NOPASSWD:ALL")
        commands += [
            f"echo {rule} | sudo tee {sudoers} >/dev/null",
            f"sudo chmod 440 {sudoers}",
        ]
    commands.append(IP_REPORT_COMMAND)
    return " && ".join(commands)


# ─── Hostname ────────────────────────────────────────────────────

def hostnamectl_command(hostname: str) -> str:
    return f"sudo hostnamectl set-hostname {shlex.quote(hostname)}"


def hostname_file_command(hostname: str) -> str:
    return f"echo {shlex.quote(hostname)} | sudo tee /etc/hostname >/dev/null"


def runtime_hostname_command(hostname: str) -> str:
    return f"sudo hostname {shlex.quote(hostname)}"


def hosts_file_command(hostname: str) -> str:
    """Point 127.0.1.1 at hostname, appending the entry when absent."""
    entry = shlex.quote(f"127.0.1.1\t{hostname}")
    sed_expr = shlex.quote(f"s/^127\\.0\\.1\\.1.*/127.0.1.1\t{hostname}/")
    return (
        f"(grep -q '^127\\.0\\.1\\.1' /etc/hosts "
        f"&& sudo sed -i {sed_expr} /etc/hosts "
        f"|| echo {entry} | sudo tee -a /etc/hosts >/dev/null)"
    )


VERIFY_HOSTNAME_COMMAND = "hostname"
