"""Shared pytest fixtures for recipe-filter-engine tests."""

from pathlib import Path
from textwrap import dedent

import pytest

from recipe_filter_engine import (
    CountingStatusReporter,
    DiscoveredProcess,
    HostSnapshot,
)


@pytest.fixture
def empty_snapshot() -> HostSnapshot:
    """A snapshot with no discovered facts."""
    return HostSnapshot()


@pytest.fixture
def linux_snapshot() -> HostSnapshot:
    """A Linux host running php-fpm and apache2."""
    return HostSnapshot(
        os="linux",
        platform="ubuntu",
        platform_family="debian",
        platform_version="22.04",
        kernel_arch="x86_64",
        hostname="web-01",
        processes=(
            DiscoveredProcess(name="php-fpm", cmdline="php-fpm", pid=1234),
            DiscoveredProcess(name="apache2", cmdline="/usr/sbin/apache2 -k start", pid=2345),
            DiscoveredProcess(name="sshd", cmdline="/usr/sbin/sshd -D", pid=1),
        ),
    )


@pytest.fixture
def apache_snapshot() -> HostSnapshot:
    """A host whose only process is apache2."""
    return HostSnapshot(
        processes=(DiscoveredProcess(name="apache2", cmdline="apache2", pid=1234),),
    )


@pytest.fixture
def reporter() -> CountingStatusReporter:
    return CountingStatusReporter()


@pytest.fixture
def recipe_dir(tmp_path: Path) -> Path:
    """A directory with a few recipe files, one of them broken."""
    recipes = tmp_path / "recipes"
    (recipes / "apache").mkdir(parents=True)
    (recipes / "apache" / "apache.yml").write_text(
        dedent("""
        name: apache-open-source-integration
        displayName: Apache Integration
        processMatch:
          - apache2
          - httpd
        preInstall:
          requireAtDiscovery: exit 0
        """).strip()
    )
    (recipes / "mysql.yaml").write_text(
        dedent("""
        name: mysql-open-source-integration
        displayName: MySQL Integration
        processMatch: mysqld
        preInstall:
          requireAtDiscovery: exit 1
        """).strip()
    )
    (recipes / "broken.yml").write_text("name: [unterminated\n")
    (recipes / "README.md").write_text("# not a recipe\n")
    return recipes
