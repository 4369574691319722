"""Starter menu tree written on first run."""

from __future__ import annotations

import logging
from pathlib import Path

from . import config

logger = logging.getLogger(__name__)

MANIFEST_TEMPLATE = """\
# Categories shown in the left pane, in order.
# name: label in the menu, key: directory under menu/ holding the unit files.
# Favorites and Recent are added automatically.
categories:
  - name: System
    key: system
  - name: Applications
    key: applications
  - name: Security
    key: security
  - name: Utilities
    key: utilities
"""

SHOW_INFO_UNIT = '''\
DESCRIPTION = "Show System Information"
DESTRUCTIVE = False
DEPENDENCIES = ["uname", "uptime"]
LONG_DESCRIPTION = (
    "Display system information including hostname, OS, kernel version, "
    "architecture, uptime and disk usage."
)


def run():
    import platform
    import shutil
    import subprocess

    uname = platform.uname()
    print("System Information:")
    print("===================")
    print(f"Hostname: {uname.node}")
    print(f"OS: {uname.system}")
    print(f"Kernel: {uname.release}")
    print(f"Architecture: {uname.machine}")
    uptime = subprocess.run(["uptime"], capture_output=True, text=True).stdout.strip()
    print(f"Uptime: {uptime}")
    usage = shutil.disk_usage("/")
    print(f"Disk Usage: {usage.used // 2**30}G used of {usage.total // 2**30}G")
    print()
    print("System information collection completed.")
'''

DISK_CLEANUP_UNIT = '''\
DESCRIPTION = "Clean System Disk Space"
DESTRUCTIVE = True
DEPENDENCIES = ["sudo", "find", "df"]
LONG_DESCRIPTION = (
    "Clean temporary files and log files older than 7 days. "
    "This action permanently deletes files and cannot be undone."
)


def run():
    import subprocess

    print("Cleaning system disk space...")
    print("Before cleanup:")
    subprocess.run(["df", "-h", "/"])
    print()
    print("Cleaning temporary files...")
    subprocess.run(["sudo", "find", "/tmp", "/var/tmp", "-mindepth", "1", "-delete"])
    print("Cleaning old log files...")
    subprocess.run(
        ["sudo", "find", "/var/log", "-type", "f", "-name", "*.log", "-mtime", "+7", "-delete"]
    )
    print()
    print("After cleanup:")
    subprocess.run(["df", "-h", "/"])
    print()
    print("Disk cleanup completed successfully.")
'''

NETWORK_INFO_UNIT = """\
#!/bin/bash
DESCRIPTION="Show Network Configuration"
DESTRUCTIVE=false
DEPENDENCIES=("ip")
LONG_DESCRIPTION="Show IP addresses, routes, DNS servers and listening sockets."

run() {
    echo "Network Information:"
    echo "===================="
    echo "IP Addresses:"
    ip addr show 2>/dev/null | grep "inet " | awk '{print $2, $NF}'
    echo ""
    echo "Routing Table:"
    ip route 2>/dev/null
    echo ""
    echo "DNS Servers:"
    grep nameserver /etc/resolv.conf 2>/dev/null
}
"""

INSTALL_GIT_UNIT = """\
#!/bin/bash
DESCRIPTION="Install Git"
DESTRUCTIVE=false
DEPENDENCIES=()
LONG_DESCRIPTION="Install the Git version control system with the detected package manager."

run() {
    if command -v git &>/dev/null; then
        echo "Git is already installed!"
        git --version
        return 0
    fi
    if command -v apt &>/dev/null; then
        sudo apt update && sudo apt install -y git
    elif command -v dnf &>/dev/null; then
        sudo dnf install -y git
    elif command -v pacman &>/dev/null; then
        sudo pacman -S --noconfirm git
    elif command -v brew &>/dev/null; then
        brew install git
    else
        echo "Package manager not supported."
        return 1
    fi
    echo "Git installed successfully!"
}
"""

SSH_KEYS_UNIT = '''\
DESCRIPTION = "List SSH Keys"
DEPENDENCIES = ["ssh-keygen"]
LONG_DESCRIPTION = "Show fingerprints of the public keys in ~/.ssh."


def run():
    import subprocess
    from pathlib import Path

    keys = sorted((Path.home() / ".ssh").glob("*.pub"))
    if not keys:
        print("No public keys found in ~/.ssh")
        return
    for key in keys:
        subprocess.run(["ssh-keygen", "-l", "-f", str(key)])
'''

CONNECTIVITY_UNIT = '''\
DESCRIPTION = "Test Internet Connectivity"
DEPENDENCIES = ["ping"]
LONG_DESCRIPTION = "Ping a few well-known hosts and report which ones answer."


def run():
    import subprocess

    for host in ("1.1.1.1", "8.8.8.8", "github.com"):
        result = subprocess.run(["ping", "-c", "2", "-W", "2", host], capture_output=True)
        status = "OK" if result.returncode == 0 else "unreachable"
        print(f"{host:<15} {status}")
'''

SCAFFOLD: dict[str, str] = {
    "system/show_info.py": SHOW_INFO_UNIT,
    "system/disk_cleanup.py": DISK_CLEANUP_UNIT,
    "system/network_info.sh": NETWORK_INFO_UNIT,
    "applications/install_git.sh": INSTALL_GIT_UNIT,
    "security/ssh_keys.py": SSH_KEYS_UNIT,
    "utilities/connectivity.py": CONNECTIVITY_UNIT,
}


def write_scaffold(menu_dir: Path | None = None) -> None:
    """Create the manifest and sample units.

    Existing files are left untouched so a partially deleted tree is
    repaired without clobbering user edits.
    """
    menu_dir = menu_dir or config.get_menu_dir()
    menu_dir.mkdir(parents=True, exist_ok=True)

    manifest = menu_dir / config.get_manifest_path().name
    if not manifest.exists():
        manifest.write_text(MANIFEST_TEMPLATE)

    for rel_path, content in SCAFFOLD.items():
        path = menu_dir / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.exists():
            continue
        path.write_text(content)
        path.chmod(0o755)
    logger.info("Wrote starter menu to %s", menu_dir)
