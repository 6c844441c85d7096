from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from PySide6.QtCore import QFileInfo, QThreadPool, QTimer
from PySide6.QtWidgets import QFileIconProvider, QMainWindow, QPushButton

from disk_info.collectors.volume_collector import VolumeCollector, with_icons
from disk_info.gui.pages.volumes_page import VolumesPage
from disk_info.gui.workers import Worker, WorkerJob
from disk_info.models.common import CollectorResult
from disk_info.models.volumes import VolumeData
from disk_info.services.config_service import ConfigService, VolumeSettings
from disk_info.services.report_service import ReportService

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle("Disk Info")
        self.resize(1100, 480)

        self._config = ConfigService()
        self._reporter = ReportService()
        self._latest_volumes: CollectorResult[VolumeData] | None = None

        self._thread_pool = QThreadPool.globalInstance()
        self._volumes_req_id = 0
        self._active_workers: set[Worker] = set()

        self._icons = QFileIconProvider()
        self._settings = self._config.load_volume_settings()
        self._collector = self._build_collector(self._settings)

        self._volumes = VolumesPage()
        self.setCentralWidget(self._volumes)
        self._volumes.refreshRequested.connect(self.refresh_volumes)  # type: ignore[arg-type]

        self.statusBar().showMessage("Ready")

        export_btn = QPushButton("Export Report")
        export_btn.clicked.connect(self._export_report)  # type: ignore[arg-type]
        self.statusBar().addPermanentWidget(export_btn)

        self._timer = QTimer(self)
        self._timer.setInterval(self._settings.refresh_interval_s * 1000)
        self._timer.timeout.connect(self.refresh_volumes)  # type: ignore[arg-type]
        self._timer.start()

        self.refresh_volumes()

    def _build_collector(self, settings: VolumeSettings) -> VolumeCollector:
        # QIcon belongs to the GUI thread; icons are attached in the result slot.
        return VolumeCollector(
            icon_provider=None,
            ignored_fstypes=settings.ignored_fstypes,
            usage_warn_percent=settings.usage_warn_percent,
        )

    def _icon_for_path(self, path: str) -> Any:
        return self._icons.icon(QFileInfo(path))

    def refresh_volumes(self) -> None:
        self._volumes_req_id += 1
        collector = self._collector

        def job() -> CollectorResult[VolumeData]:
            return collector.collect()

        w = Worker(WorkerJob(fn=job, req_id=self._volumes_req_id))
        self._active_workers.add(w)
        w.signals.result.connect(self._on_volumes_result)  # type: ignore[arg-type]
        w.signals.error.connect(self._on_worker_error)  # type: ignore[arg-type]
        w.signals.finished.connect(lambda _w=w: self._active_workers.discard(_w))  # type: ignore[arg-type]
        self._thread_pool.start(w)

    def _on_volumes_result(self, req_id: int, res: Any) -> None:
        if req_id != self._volumes_req_id:
            return
        if not isinstance(res, CollectorResult):
            return
        try:
            vols = with_icons(res.data.volumes, self._icon_for_path)
            volumes_res: CollectorResult[VolumeData] = replace(res, data=VolumeData(volumes=vols))
            self._latest_volumes = volumes_res
            self._volumes.set_data(volumes_res)
            self.statusBar().showMessage(
                f"Updated: {volumes_res.ts.strftime('%F %T')} | Volumes: {len(vols)} | Warnings: {volumes_res.warning_count}"
            )
        except Exception as e:  # noqa: BLE001
            self._on_worker_error(str(e))

    def _export_report(self) -> None:
        try:
            bundle = self._reporter.build_report(volumes=self._latest_volumes)
            out = self._reporter.default_report_path()
            written = self._reporter.write_html(out, bundle.html)
            self.statusBar().showMessage(f"Report exported: {written}")
        except Exception as e:  # noqa: BLE001
            self._on_worker_error(str(e))

    def _on_worker_error(self, msg: str) -> None:
        # Avoid frequent modal dialogs during periodic refresh.
        logger.warning("Disk info error: %s", msg)
        self.statusBar().showMessage(f"Error: {msg}")
