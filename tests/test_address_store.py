from __future__ import annotations

import os
from pathlib import Path

import pytest

from skylinectl.core import address_store
from skylinectl.core.address_store import AddressStore, validate_address
from skylinectl.core.errors import (
    BadIpAddrError,
    CreateSwitchDirDeniedError,
    NoHomeDirError,
    NoIpFoundError,
    WriteIpDeniedError,
)


@pytest.mark.parametrize("ip", ["192.168.1.10", "10.0.0.1", "0.0.0.0", "255.255.255.255"])
def test_set_then_get_round_trips(tmp_path: Path, ip: str) -> None:
    store = AddressStore(tmp_path / ".switch")
    store.set(ip)
    assert store.get() == ip
    assert (tmp_path / ".switch" / "ip_addr.txt").read_text(encoding="utf-8") == ip


@pytest.mark.parametrize(
    "bad",
    ["", "   ", "192.168.1", "192.168.1.256", "1.2.3.4.5", "not an ip", "-switch", "switch..local", "a/b"],
)
def test_malformed_address_is_rejected_and_not_persisted(tmp_path: Path, bad: str) -> None:
    store = AddressStore(tmp_path / ".switch")
    with pytest.raises(BadIpAddrError):
        store.set(bad)
    assert not store.path.exists()


def test_hostnames_and_ipv6_are_accepted() -> None:
    assert validate_address("switch.local") == "switch.local"
    assert validate_address(" my-switch ") == "my-switch"
    assert validate_address("fe80::1") == "fe80::1"


def test_get_without_configuration_is_distinct_error(tmp_path: Path) -> None:
    with pytest.raises(NoIpFoundError):
        AddressStore(tmp_path / ".switch").get()


def test_blank_file_counts_as_not_configured(tmp_path: Path) -> None:
    config_dir = tmp_path / ".switch"
    config_dir.mkdir()
    (config_dir / "ip_addr.txt").write_text("\n", encoding="utf-8")
    with pytest.raises(NoIpFoundError):
        AddressStore(config_dir).get()


def test_explicit_address_overwrites_stored_default(tmp_path: Path) -> None:
    store = AddressStore(tmp_path / ".switch")
    store.set("192.168.1.10")

    assert store.resolve("192.168.1.20") == "192.168.1.20"
    assert store.get() == "192.168.1.20"
    assert store.resolve(None) == "192.168.1.20"


def test_explicit_bad_address_leaves_store_untouched(tmp_path: Path) -> None:
    store = AddressStore(tmp_path / ".switch")
    store.set("192.168.1.10")

    with pytest.raises(BadIpAddrError):
        store.resolve("999.1.1.1")
    assert store.get() == "192.168.1.10"


def test_directory_creation_failure(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")

    with pytest.raises(CreateSwitchDirDeniedError):
        AddressStore(blocker / ".switch").set("192.168.1.10")


def test_write_failure_cleans_up_temp_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def deny(src, dst):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(os, "replace", deny)
    config_dir = tmp_path / ".switch"

    with pytest.raises(WriteIpDeniedError):
        AddressStore(config_dir).set("192.168.1.10")
    assert list(config_dir.iterdir()) == []


def test_missing_home_directory(monkeypatch: pytest.MonkeyPatch) -> None:
    def no_home(cls):
        raise RuntimeError("Could not determine home directory.")

    monkeypatch.setattr(address_store.Path, "home", classmethod(no_home))

    with pytest.raises(NoHomeDirError):
        AddressStore().set("192.168.1.10")
    with pytest.raises(NoHomeDirError):
        AddressStore().get()


def test_default_location_is_under_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    store = AddressStore()
    store.set("192.168.1.10")
    assert (tmp_path / ".switch" / "ip_addr.txt").read_text(encoding="utf-8") == "192.168.1.10"


def test_corrupted_stored_address_is_rejected(tmp_path: Path) -> None:
    config_dir = tmp_path / ".switch"
    config_dir.mkdir()
    (config_dir / "ip_addr.txt").write_text("not an ip!!\n", encoding="utf-8")
    store = AddressStore(config_dir)

    with pytest.raises(BadIpAddrError) as exc:
        store.get()
    assert "ip_addr.txt" in str(exc.value)
    with pytest.raises(BadIpAddrError):
        store.resolve(None)


def test_unexpanded_home_counts_as_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    def tilde_home(cls):
        return cls("~")

    monkeypatch.setattr(address_store.Path, "home", classmethod(tilde_home))

    with pytest.raises(NoHomeDirError):
        AddressStore().set("192.168.1.10")
