"""
Wiederkehrende Timer: Liste anzeigen, Prioritaet waehlen, loeschen
"""
import asyncio
import logging

from PySide6.QtCore import Qt, Slot
from PySide6.QtWidgets import (
    QComboBox, QDialog, QHBoxLayout, QLabel, QListWidgetItem,
    QMessageBox, QPushButton, QVBoxLayout,
)

from nextpvr_api import RecurringTimer
from priority_index import TIER_LABELS, PriorityTier
from timer_manager import ScheduleRefreshError

logger = logging.getLogger(__name__)

MSG_REFRESH_FAILED = "Zeitplan konnte nicht aktualisiert werden"
MSG_REORDER_FAILED = "Timer konnte nicht umsortiert werden"


class TimerMixin:

    async def _load_timers(self):
        """Laedt die Timer vom Server und baut die Liste neu auf."""
        self.status_bar.showMessage("Lade Timer...")
        try:
            timers = await self.timer_manager.refresh()
        except ScheduleRefreshError:
            self.status_bar.showMessage(MSG_REFRESH_FAILED)
            self.timer_list.clear()
            return
        self._populate_timer_list(timers)
        self.status_bar.showMessage(f"{len(timers)} wiederkehrende Timer")

    def _populate_timer_list(self, timers: list[RecurringTimer]):
        self.timer_list.clear()
        for timer in sorted(timers, key=lambda t: t.priority):
            tier = self.timer_manager.tier_of(timer.id)
            tier_text = TIER_LABELS[tier] if tier else ""
            text = f"{timer.priority:>4}  {timer.name}"
            if tier_text:
                text += f"  ({tier_text})"
            if not timer.enabled:
                text += "  [deaktiviert]"
            item = QListWidgetItem(text)
            item.setData(Qt.UserRole, timer)
            self.timer_list.addItem(item)

    def _selected_timer(self) -> RecurringTimer | None:
        item = self.timer_list.currentItem()
        return item.data(Qt.UserRole) if item else None

    @Slot()
    def _on_refresh_clicked(self):
        asyncio.ensure_future(self._load_timers())

    @Slot(QListWidgetItem)
    def _on_timer_double_clicked(self, item: QListWidgetItem):
        timer = item.data(Qt.UserRole)
        if timer:
            self._open_priority_dialog(timer)

    @Slot()
    def _on_priority_clicked(self):
        timer = self._selected_timer()
        if timer:
            self._open_priority_dialog(timer)

    def _open_priority_dialog(self, timer: RecurringTimer):
        """Oeffnet den Dialog zur Auswahl von Stufe oder Einfuegeposition."""
        index = self.timer_manager.index
        if index is None:
            self.status_bar.showMessage(MSG_REFRESH_FAILED)
            return

        dialog = QDialog(self)
        dialog.setWindowTitle("Prioritaet aendern")
        dialog.setModal(True)
        dialog.setMinimumWidth(380)

        layout = QVBoxLayout(dialog)
        layout.setSpacing(12)
        layout.setContentsMargins(20, 20, 20, 20)

        lbl_name = QLabel(timer.name)
        lbl_name.setStyleSheet("font-size: 15px; font-weight: bold;")
        layout.addWidget(lbl_name)

        tier = index.tier_of(timer.id)
        current = f"Aktuell: {timer.priority}"
        if tier:
            current += f" ({TIER_LABELS[tier]})"
        layout.addWidget(QLabel(current))

        # Zahlenwerte bedeuten: vor diesem Timer einfuegen
        combo = QComboBox()
        for selection, label in index.choices():
            combo.addItem(label, selection)
        layout.addWidget(combo)

        btn_row = QHBoxLayout()
        btn_cancel = QPushButton("Abbrechen")
        btn_cancel.clicked.connect(dialog.reject)
        btn_confirm = QPushButton("Uebernehmen")

        def on_confirm():
            selection = combo.currentData()
            if selection != PriorityTier.DEFAULT:
                asyncio.ensure_future(self._apply_priority(timer, selection))
            dialog.accept()

        btn_confirm.clicked.connect(on_confirm)
        btn_row.addWidget(btn_cancel)
        btn_row.addStretch()
        btn_row.addWidget(btn_confirm)
        layout.addLayout(btn_row)

        dialog.exec()

    async def _apply_priority(self, timer: RecurringTimer, selection):
        self.status_bar.showMessage(f"Sortiere {timer.name} um...")
        try:
            moved = await self.timer_manager.set_priority(timer.id, selection)
        except Exception as e:
            logger.error("Umsortieren von %s fehlgeschlagen: %s", timer.name, e)
            self.status_bar.showMessage(MSG_REORDER_FAILED)
            self._populate_timer_list(self.timer_manager.get_all())
            return
        self._populate_timer_list(self.timer_manager.get_all())
        if moved:
            self.status_bar.showMessage(f"Prioritaet geaendert: {timer.name}")
        else:
            self.status_bar.showMessage(f"Keine Aenderung: {timer.name}")

    @Slot()
    def _on_delete_clicked(self):
        timer = self._selected_timer()
        if not timer:
            return
        answer = QMessageBox.question(
            self, "Timer loeschen",
            f"Wiederkehrenden Timer '{timer.name}' wirklich loeschen?",
        )
        if answer == QMessageBox.Yes:
            asyncio.ensure_future(self._delete_timer(timer))

    async def _delete_timer(self, timer: RecurringTimer):
        try:
            await self.timer_manager.delete_timer(timer.id)
        except Exception as e:
            logger.error("Loeschen von %s fehlgeschlagen: %s", timer.name, e)
            self.status_bar.showMessage(f"Timer konnte nicht geloescht werden: {timer.name}")
            return
        self._populate_timer_list(self.timer_manager.get_all())
        self.status_bar.showMessage(f"Timer geloescht: {timer.name}")
