from __future__ import annotations

import html
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from disk_info.models.common import CollectorResult
from disk_info.models.volumes import VolumeData, VolumeInfo


def human_bytes(n: int) -> str:
    sign = "-" if n < 0 else ""
    v = float(abs(n))
    for unit in ("B", "KB", "MB", "GB", "TB"):
        if v < 1024.0:
            return f"{sign}{v:.1f}{unit}" if unit != "B" else f"{sign}{int(v)}B"
        v /= 1024.0
    return f"{sign}{v:.1f}PB"


@dataclass(frozen=True)
class ReportBundle:
    text: str
    html: str


class ReportService:
    def build_report(self, *, volumes: CollectorResult[VolumeData] | None) -> ReportBundle:
        now = datetime.now().strftime("%F %T")

        lines: list[str] = [f"Disk Info Report @ {now}", ""]
        lines.append(self._section_volumes(volumes))
        text_out = "\n".join(lines).strip() + "\n"

        html_out = self._wrap_html(text_out)
        return ReportBundle(text=text_out, html=html_out)

    def default_report_path(self) -> Path:
        base = Path.home() / "disk_info_reports"
        base.mkdir(parents=True, exist_ok=True)
        ts = datetime.now().strftime("%Y%m%d-%H%M%S")
        return base / f"disk_report_{ts}.html"

    def write_html(self, path: str | os.PathLike[str], html_str: str) -> str:
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(html_str, encoding="utf-8")
        return str(p)

    def _section_volumes(self, r: CollectorResult[VolumeData] | None) -> str:
        if r is None:
            return "[Volumes]\n- no data\n"
        vols = r.data.volumes
        out = (
            "[Volumes]\n"
            f"- ts: {r.ts:%F %T}\n"
            f"- status: {r.status} (warnings={r.warning_count})\n"
            f"- count: {len(vols)}\n"
        )
        if not vols:
            return out + "- (none)\n"
        return out + "".join(self._volume_block(v) for v in vols)

    def _volume_block(self, v: VolumeInfo) -> str:
        rows = [
            f"  - {e.category.display_name}: {human_bytes(e.bytes)} ({e.percent * 100:.1f}%)"
            for e in v.file_distribution.distribution
        ]
        return (
            f"- {v.name} ({v.path or '-'})\n"
            f"  capacity: {human_bytes(v.capacity)}, available: {human_bytes(v.available)}, "
            f"removable: {'yes' if v.removable else 'no'}\n" + "\n".join(rows) + "\n"
        )

    def _wrap_html(self, text_out: str) -> str:
        escaped = html.escape(text_out)
        return (
            "<!doctype html>"
            "<html><head><meta charset='utf-8'>"
            "<meta name='viewport' content='width=device-width, initial-scale=1'>"
            "<title>Disk Info Report</title>"
            "<style>body{font-family:ui-monospace,Menlo,Consolas,monospace;margin:24px;}"
            "pre{white-space:pre-wrap;line-height:1.35;}"
            "</style></head><body>"
            "<h1>Disk Info Report</h1>"
            f"<pre>{escaped}</pre>"
            "</body></html>"
        )
