"""
Hauptfenster: Liste der wiederkehrenden Timer eines NextPVR-Servers
"""
import asyncio

from PySide6.QtWidgets import (
    QHBoxLayout, QListWidget, QMainWindow, QPushButton, QStatusBar,
    QVBoxLayout, QWidget,
)

from app_settings import AppSettings
from nextpvr_api import NextPVRAPI, NextPVRCredentials
from timer_manager import TimerManager
from timer_mixin import TimerMixin


class MainWindow(TimerMixin, QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("NextPVR Timer")
        self.setMinimumSize(640, 480)

        self.app_settings = AppSettings()
        creds = NextPVRCredentials.from_settings(self.app_settings)
        self.api = NextPVRAPI(creds)
        self.timer_manager = TimerManager(
            self.api, reconcile_timeout=float(self.app_settings.get("reconcile_timeout")),
        )

        self._setup_ui()
        self._setup_statusbar()

        asyncio.ensure_future(self._load_timers())

    def _setup_ui(self):
        central = QWidget()
        self.setCentralWidget(central)

        layout = QVBoxLayout(central)
        layout.setContentsMargins(12, 12, 12, 12)

        # Aktionen
        btn_row = QHBoxLayout()
        self.btn_refresh = QPushButton("Aktualisieren")
        self.btn_refresh.clicked.connect(self._on_refresh_clicked)
        self.btn_priority = QPushButton("Prioritaet...")
        self.btn_priority.clicked.connect(self._on_priority_clicked)
        self.btn_delete = QPushButton("Loeschen")
        self.btn_delete.clicked.connect(self._on_delete_clicked)
        btn_row.addWidget(self.btn_refresh)
        btn_row.addWidget(self.btn_priority)
        btn_row.addStretch()
        btn_row.addWidget(self.btn_delete)
        layout.addLayout(btn_row)

        self.timer_list = QListWidget()
        self.timer_list.itemDoubleClicked.connect(self._on_timer_double_clicked)
        layout.addWidget(self.timer_list)

    def _setup_statusbar(self):
        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)
