from __future__ import annotations

import logging
import os
import random
import re
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterable

import psutil

from disk_info.models.common import CollectorResult
from disk_info.models.volumes import VolumeData, VolumeInfo
from disk_info.services.distribution_service import generate_distribution

logger = logging.getLogger(__name__)

IconProvider = Callable[[str], Any]

NETWORK_FSTYPES = frozenset(
    {
        "nfs",
        "nfs4",
        "cifs",
        "smbfs",
        "smb3",
        "afpfs",
        "webdav",
        "davfs",
        "fuse.sshfs",
        "sshfs",
        "9p",
        "ncpfs",
        "afs",
        "ceph",
        "glusterfs",
        "fuse.glusterfs",
    }
)

BY_LABEL_DIR = Path("/dev/disk/by-label")
BY_UUID_DIR = Path("/dev/disk/by-uuid")
SYS_BLOCK_DIR = Path("/sys/class/block")

_UDEV_ESCAPE = re.compile(rb"\\x([0-9a-fA-F]{2})")


@dataclass(frozen=True)
class VolumeMetadata:
    path: str
    name: str
    removable: bool
    capacity: int
    available: int
    uuid: str


class VolumeCollector:
    def __init__(
        self,
        icon_provider: IconProvider | None = None,
        ignored_fstypes: Iterable[str] | None = None,
        usage_warn_percent: int = 90,
        rng: random.Random | None = None,
    ) -> None:
        self.icon_provider = icon_provider
        self.ignored_fstypes = frozenset(str(x) for x in (ignored_fstypes or ()))
        self.usage_warn_percent = int(usage_warn_percent)
        self.rng = rng

    def collect(self) -> CollectorResult[VolumeData]:
        ts = datetime.now()
        warnings: list[str] = []

        volumes = self.list_volumes()
        for v in volumes:
            if v.used_percent >= self.usage_warn_percent:
                warnings.append(
                    f"Volume nearly full: {v.name} {v.used_percent:.0f}% (>= {self.usage_warn_percent}%)"
                )

        return CollectorResult.from_warnings(ts, VolumeData(volumes=volumes), warnings)

    def list_volumes(self) -> list[VolumeInfo]:
        try:
            partitions = psutil.disk_partitions(all=False)
        except Exception as e:  # noqa: BLE001
            logger.debug("Volume enumeration failed: %s", e)
            return []

        labels = _device_links(BY_LABEL_DIR)
        uuids = _device_links(BY_UUID_DIR)

        rows: list[VolumeInfo] = []
        for p in partitions:
            if self._is_hidden(p):
                continue
            # statvfs on a stalled network mount can block indefinitely
            if not _is_local(p):
                logger.debug("Skipping %s: not a local volume", p.mountpoint)
                continue
            meta = self._read_metadata(p, labels, uuids)
            if meta is None:
                continue
            info = self._volume_info(meta)
            if info is not None:
                rows.append(info)
        return rows

    def _is_hidden(self, p: Any) -> bool:
        mount = str(p.mountpoint)
        if Path(mount).name.startswith("."):
            return True
        return str(p.fstype) in self.ignored_fstypes

    def _read_metadata(
        self,
        p: Any,
        labels: dict[str, str],
        uuids: dict[str, str],
    ) -> VolumeMetadata | None:
        mount = str(p.mountpoint)
        try:
            u = psutil.disk_usage(mount)
        except Exception as e:  # noqa: BLE001
            logger.debug("Skipping %s: usage unavailable (%s)", mount, e)
            return None

        capacity = getattr(u, "total", None)
        available = getattr(u, "free", None)
        if capacity is None or available is None:
            logger.debug("Skipping %s: capacity unavailable", mount)
            return None

        device = str(p.device or "")
        real_device = os.path.realpath(device) if device else ""
        return VolumeMetadata(
            path=mount,
            name=_volume_name(mount, device, labels.get(real_device)),
            removable="removable" in _opts(p) or _sysfs_removable(real_device),
            capacity=int(capacity),
            available=int(available),
            uuid=uuids.get(real_device, ""),
        )

    def _volume_info(self, meta: VolumeMetadata) -> VolumeInfo | None:
        distribution = generate_distribution(meta.capacity, meta.available, rng=self.rng)
        if distribution is None:
            logger.debug("Skipping %s: capacity %d", meta.path, meta.capacity)
            return None

        logger.debug("Volume %s (%s) uuid=%s", meta.name, meta.path, meta.uuid or "-")
        return VolumeInfo(
            name=meta.name,
            volume_type="",
            capacity=meta.capacity,
            available=meta.available,
            removable=meta.removable,
            file_distribution=distribution,
            image=lookup_icon(self.icon_provider, meta.path),
            path=meta.path,
        )


def lookup_icon(icon_provider: IconProvider | None, path: str) -> Any:
    if icon_provider is None or not path:
        return None
    try:
        return icon_provider(path)
    except Exception as e:  # noqa: BLE001
        logger.debug("No icon for %s: %s", path, e)
        return None


def with_icons(volumes: list[VolumeInfo], icon_provider: IconProvider | None) -> list[VolumeInfo]:
    """Copies of ``volumes`` with icons looked up on the calling thread."""
    return [replace(v, image=lookup_icon(icon_provider, v.path)) for v in volumes]


def _is_local(p: Any) -> bool:
    return "remote" not in _opts(p) and str(p.fstype).lower() not in NETWORK_FSTYPES


def _opts(p: Any) -> set[str]:
    raw = str(getattr(p, "opts", "") or "")
    return {o.strip().lower() for o in raw.split(",") if o.strip()}


def _volume_name(mount: str, device: str, label: str | None) -> str:
    if label:
        return label
    name = Path(mount).name
    if name:
        return name
    if device:
        return Path(device).name or device
    return mount


def _unescape_udev(name: str) -> str:
    # udev writes unsafe bytes of the UTF-8 label as \xNN
    raw = _UDEV_ESCAPE.sub(lambda m: bytes([int(m.group(1), 16)]), os.fsencode(name))
    return raw.decode("utf-8", "replace")


def _device_links(root: Path) -> dict[str, str]:
    """Map resolved device paths to link names under /dev/disk/by-*."""
    links: dict[str, str] = {}
    if not root.is_dir():
        return links
    try:
        entries = list(root.iterdir())
    except OSError:
        return links
    for entry in entries:
        try:
            target = os.path.realpath(entry)
        except OSError:
            continue
        links[target] = _unescape_udev(entry.name)
    return links


def _sysfs_removable(real_device: str) -> bool:
    if not real_device.startswith("/dev/"):
        return False
    block = SYS_BLOCK_DIR / Path(real_device).name
    try:
        if (block / "partition").exists():
            block = block.resolve().parent
        return (block / "removable").read_text(encoding="utf-8").strip() == "1"
    except OSError:
        return False
