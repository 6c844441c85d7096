from __future__ import annotations

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QIcon
from PySide6.QtWidgets import (
    QAbstractItemView,
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QProgressBar,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from disk_info.models.common import CollectorResult
from disk_info.models.volumes import FileCategory, VolumeData, VolumeInfo
from disk_info.services.report_service import human_bytes

_BASE_HEADERS = ["NAME", "CAPACITY", "USED", "AVAILABLE", "REMOVABLE"]
_CATEGORIES = list(FileCategory)


class VolumesPage(QWidget):
    refreshRequested = Signal()

    def __init__(self) -> None:
        super().__init__()

        self._status = QLabel("-")
        self._count = QLabel("-")
        self._warnings = QLabel("")
        self._warnings.setWordWrap(True)
        self._status.setTextInteractionFlags(Qt.TextSelectableByMouse)
        self._warnings.setTextInteractionFlags(Qt.TextSelectableByMouse)

        refresh_btn = QPushButton("Refresh")
        refresh_btn.clicked.connect(lambda: self.refreshRequested.emit())  # type: ignore[arg-type]

        summary = QGroupBox("Volumes Summary")
        grid = QGridLayout(summary)
        grid.addWidget(QLabel("Status"), 0, 0)
        grid.addWidget(self._status, 0, 1)
        grid.addWidget(QLabel("Volumes"), 1, 0)
        grid.addWidget(self._count, 1, 1)
        grid.addWidget(QLabel("Warnings"), 2, 0)
        grid.addWidget(self._warnings, 2, 1)

        top = QHBoxLayout()
        top.addWidget(summary)
        top.addStretch(1)
        top.addWidget(refresh_btn)

        headers = _BASE_HEADERS + [c.display_name.upper() for c in _CATEGORIES]
        gb = QGroupBox("Mounted Volumes")
        self._table = QTableWidget(0, len(headers))
        self._table.setHorizontalHeaderLabels(headers)
        self._table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self._table.setSelectionBehavior(QAbstractItemView.SelectRows)
        self._table.setAlternatingRowColors(True)
        self._table.horizontalHeader().setStretchLastSection(True)
        l = QVBoxLayout(gb)
        l.addWidget(self._table)

        layout = QVBoxLayout(self)
        layout.addLayout(top)
        layout.addWidget(gb, 1)

    def set_data(self, result: CollectorResult[VolumeData]) -> None:
        vols = result.data.volumes
        self._status.setText(str(result.status))
        self._count.setText(str(len(vols)))
        self._warnings.setText("\n".join(result.warnings) if result.warnings else "")
        self._fill_volumes(vols)

    def _fill_volumes(self, rows: list[VolumeInfo]) -> None:
        t = self._table
        t.setRowCount(len(rows))
        for r, v in enumerate(rows):
            name = QTableWidgetItem(v.name)
            if isinstance(v.image, QIcon):
                name.setIcon(v.image)
            name.setToolTip(v.path)
            t.setItem(r, 0, name)
            t.setItem(r, 1, QTableWidgetItem(human_bytes(v.capacity)))
            t.setCellWidget(r, 2, self._usage_bar(v))
            t.setItem(r, 3, QTableWidgetItem(human_bytes(v.available)))
            t.setItem(r, 4, QTableWidgetItem("YES" if v.removable else "NO"))
            for c, cat in enumerate(_CATEGORIES, start=len(_BASE_HEADERS)):
                entry = v.file_distribution.by_category(cat)
                text = "-" if entry is None else f"{human_bytes(entry.bytes)} ({entry.percent * 100:.1f}%)"
                t.setItem(r, c, QTableWidgetItem(text))
        t.resizeColumnsToContents()

    def _usage_bar(self, v: VolumeInfo) -> QProgressBar:
        bar = QProgressBar()
        bar.setRange(0, 100)
        bar.setValue(max(0, min(100, int(round(v.used_percent)))))
        bar.setFormat(f"{human_bytes(v.used)} ({v.used_percent:.0f}%)")
        return bar
