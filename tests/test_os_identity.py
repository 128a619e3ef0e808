import pytest

from sysdash.services import os_identity
from sysdash.services.os_identity import (
    GenericOsIdentity,
    LinuxOsIdentity,
    MacOsIdentity,
    OsIdentity,
    WindowsOsIdentity,
    classify_windows_build,
    default_os_identity,
)


@pytest.mark.parametrize(
    "build, expected",
    [
        (10240, "Windows 10"),
        (19045, "Windows 10"),
        (21999, "Windows 10"),
        (22000, "Windows 11"),
        (26100, "Windows 11"),
    ],
)
def test_classify_windows_build(build, expected):
    assert classify_windows_build(build) == expected


def test_windows_identity_uses_build_number(monkeypatch):
    monkeypatch.setattr(os_identity.platform, "version", lambda: "10.0.22631")

    identity = WindowsOsIdentity()
    assert identity.name() == "Windows 11"
    assert identity.version() == "10.0.22631"


def test_windows_10_identity(monkeypatch):
    monkeypatch.setattr(os_identity.platform, "version", lambda: "10.0.19045")
    assert WindowsOsIdentity().name() == "Windows 10"


@pytest.mark.parametrize(
    "release, expected",
    [
        ("6.8.0-45-generic", "6.8.0"),
        ("6.18.44-fc-v139", "6.18.44"),
        ("5.15", "5.15.0"),
    ],
)
def test_linux_identity_version(monkeypatch, release, expected):
    monkeypatch.setattr(os_identity.platform, "release", lambda: release)

    identity = LinuxOsIdentity()
    assert identity.name() == "Linux"
    assert identity.version() == expected


def test_mac_identity_without_release_raises(monkeypatch):
    monkeypatch.setattr(os_identity.platform, "mac_ver", lambda: ("", ("", "", ""), ""))
    with pytest.raises(ValueError):
        MacOsIdentity().version()


def test_unparseable_version_raises(monkeypatch):
    monkeypatch.setattr(os_identity.platform, "release", lambda: "unknown")
    with pytest.raises(ValueError):
        GenericOsIdentity().version()


@pytest.mark.parametrize(
    "system, expected_type",
    [
        ("Windows", WindowsOsIdentity),
        ("Linux", LinuxOsIdentity),
        ("Darwin", MacOsIdentity),
        ("FreeBSD", GenericOsIdentity),
    ],
)
def test_default_os_identity_by_platform(monkeypatch, system, expected_type):
    monkeypatch.setattr(os_identity.platform, "system", lambda: system)
    assert isinstance(default_os_identity(), expected_type)


def test_os_identity_base_is_abstract():
    with pytest.raises(TypeError):
        OsIdentity()
