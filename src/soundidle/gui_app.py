from __future__ import annotations

import logging
import sys
from collections.abc import Coroutine
from concurrent.futures import Future
from pathlib import Path
from typing import Any

from PyQt6.QtCore import QLocale, QObject, pyqtSignal
from PyQt6.QtGui import QAction, QCloseEvent
from PyQt6.QtWidgets import (
    QApplication,
    QCheckBox,
    QComboBox,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMenu,
    QMessageBox,
    QPushButton,
    QStyle,
    QSystemTrayIcon,
    QVBoxLayout,
    QWidget,
)

from .async_loop import LoopThread
from .bridge import OperationResult, SettingsState, coerce_minutes
from .config import load_config
from .runtime import Runtime, open_runtime

logger = logging.getLogger(__name__)

LANG_PT = "pt"
LANG_EN = "en"

TRANSLATIONS: dict[str, dict[str, str]] = {
    LANG_PT: {
        "window_title": "SoundIdle",
        "title_text": "Silenciar após inatividade",
        "language_label": "Idioma:",
        "settings_group_title": "Configurações",
        "label_timeout": "Timeout de Inatividade (minutos):",
        "btn_save": "Salvar",
        "checkbox_autostart": "Iniciar com o sistema",
        "status_loading": "Carregando configurações...",
        "status_ready": "Pronto.",
        "status_saving": "Salvando...",
        "status_autostart_busy": "Atualizando inicialização automática...",
        "save_success_title": "Timeout",
        "save_success_body": "Timeout salvo com sucesso!",
        "save_error_title": "Erro",
        "save_error_body": "Erro ao salvar timeout: {error}",
        "autostart_error_title": "Inicialização automática",
        "autostart_error_body": "Não foi possível alterar a inicialização automática: {error}",
        "tray_toggle": "Alternar Janela",
        "tray_quit": "Sair",
    },
    LANG_EN: {
        "window_title": "SoundIdle",
        "title_text": "Mute after inactivity",
        "language_label": "Language:",
        "settings_group_title": "Settings",
        "label_timeout": "Inactivity timeout (minutes):",
        "btn_save": "Save",
        "checkbox_autostart": "Start with the system",
        "status_loading": "Loading settings...",
        "status_ready": "Ready.",
        "status_saving": "Saving...",
        "status_autostart_busy": "Updating autostart...",
        "save_success_title": "Timeout",
        "save_success_body": "Timeout saved successfully!",
        "save_error_title": "Error",
        "save_error_body": "Failed to save timeout: {error}",
        "autostart_error_title": "Autostart",
        "autostart_error_body": "Unable to change autostart: {error}",
        "tray_toggle": "Show/Hide Window",
        "tray_quit": "Quit",
    },
}

APP_STYLESHEET = """
QWidget {
    font-size: 15px;
}
QLabel#titleText {
    font-size: 22px;
    font-weight: 800;
}
QLabel#statusText {
    color: #475569;
}
QGroupBox {
    border: 2px solid #cbd5e1;
    border-radius: 10px;
    margin-top: 12px;
    padding-top: 10px;
    font-weight: 700;
}
QGroupBox::title {
    subcontrol-origin: margin;
    left: 12px;
    padding: 0 6px;
}
QPushButton#primaryAction {
    min-height: 36px;
    font-weight: 700;
    border: 2px solid #084298;
    border-radius: 8px;
    background-color: #0b5ed7;
    color: #ffffff;
    padding: 4px 16px;
}
QPushButton:disabled {
    background-color: #cbd5e1;
    border-color: #94a3b8;
    color: #64748b;
}
QLineEdit,
QComboBox {
    background-color: #ffffff;
    border: 2px solid #94a3b8;
    border-radius: 8px;
    padding: 4px;
}
"""

OP_INITIALIZE = "initialize"
OP_SAVE = "save"
OP_TOGGLE = "toggle_autostart"


def initial_language() -> str:
    if QLocale.system().name().lower().startswith("pt"):
        return LANG_PT
    return LANG_EN


class _BridgeSignals(QObject):
    """Carries bridge results from the loop thread to the Qt thread."""

    state_changed = pyqtSignal(object)
    operation_finished = pyqtSignal(str, object)
    operation_failed = pyqtSignal(str, str)


class SettingsWindow(QWidget):
    def __init__(self, runtime: Runtime, loop: LoopThread, language: str = LANG_PT) -> None:
        super().__init__()
        self._runtime = runtime
        self._loop = loop
        self._state: SettingsState = runtime.bridge.state
        self._quitting = False
        self._save_pending = False
        self._toggle_pending = False
        self._status_key = "status_loading"
        self._signals = _BridgeSignals()
        self._signals.state_changed.connect(self._on_state_changed)
        self._signals.operation_finished.connect(self._on_operation_finished)
        self._signals.operation_failed.connect(self._on_operation_failed)
        self._unsubscribe = runtime.bridge.subscribe(self._signals.state_changed.emit)

        self.resize(560, 260)
        self.setStyleSheet(APP_STYLESHEET)

        self.language_label = QLabel()
        self.language_selector = QComboBox()
        self.language_selector.addItem("Português", LANG_PT)
        self.language_selector.addItem("English", LANG_EN)
        self.language_selector.setCurrentIndex(0 if language == LANG_PT else 1)

        self.title_label = QLabel()
        self.title_label.setObjectName("titleText")
        self.timeout_label = QLabel()
        self.timeout_input = QLineEdit(str(self._state.timeout_minutes))
        self.timeout_input.setMaximumWidth(120)
        self.save_button = QPushButton()
        self.save_button.setObjectName("primaryAction")
        self.autostart_checkbox = QCheckBox()
        self.autostart_checkbox.setChecked(self._state.autostart_enabled)
        self.status_label = QLabel()
        self.status_label.setObjectName("statusText")

        self.tray = QSystemTrayIcon(self)
        self.tray_menu = QMenu(self)
        self.tray_toggle_action = QAction(self)
        self.tray_quit_action = QAction(self)

        self._build_layout()
        self._build_tray()
        self._wire_events()
        self._apply_language()
        self._set_controls_enabled(False)
        self._set_status("status_loading")

    def _language(self) -> str:
        value = self.language_selector.currentData()
        if isinstance(value, str) and value in TRANSLATIONS:
            return value
        return LANG_PT

    def _t(self, key: str, **kwargs: object) -> str:
        catalog = TRANSLATIONS.get(self._language(), TRANSLATIONS[LANG_PT])
        text = catalog.get(key, key)
        return text.format(**kwargs)

    def _apply_language(self) -> None:
        self.setWindowTitle(self._t("window_title"))
        self.title_label.setText(self._t("title_text"))
        self.language_label.setText(self._t("language_label"))
        self.settings_group.setTitle(self._t("settings_group_title"))
        self.timeout_label.setText(self._t("label_timeout"))
        self.save_button.setText(self._t("btn_save"))
        self.autostart_checkbox.setText(self._t("checkbox_autostart"))
        self.tray_toggle_action.setText(self._t("tray_toggle"))
        self.tray_quit_action.setText(self._t("tray_quit"))
        self.tray.setToolTip(self._t("window_title"))
        self._set_status(self._status_key)

    def _build_layout(self) -> None:
        root_layout = QVBoxLayout(self)
        root_layout.setSpacing(10)

        header_row = QHBoxLayout()
        header_row.addWidget(self.title_label, stretch=1)
        header_row.addWidget(self.language_label)
        header_row.addWidget(self.language_selector)
        root_layout.addLayout(header_row)

        self.settings_group = QGroupBox()
        form = QFormLayout(self.settings_group)
        timeout_row = QHBoxLayout()
        timeout_row.addWidget(self.timeout_input)
        timeout_row.addWidget(self.save_button)
        timeout_row.addStretch(1)
        timeout_widget = QWidget(self.settings_group)
        timeout_widget.setLayout(timeout_row)
        form.addRow(self.timeout_label, timeout_widget)
        form.addRow(self.autostart_checkbox)
        root_layout.addWidget(self.settings_group)

        root_layout.addStretch(1)
        root_layout.addWidget(self.status_label)

    def _build_tray(self) -> None:
        style = self.style()
        if style is not None:
            self.tray.setIcon(style.standardIcon(QStyle.StandardPixmap.SP_MediaVolume))
        self.tray_menu.addAction(self.tray_toggle_action)
        self.tray_menu.addAction(self.tray_quit_action)
        self.tray.setContextMenu(self.tray_menu)
        if QSystemTrayIcon.isSystemTrayAvailable():
            self.tray.show()

    def _wire_events(self) -> None:
        self.timeout_input.textEdited.connect(self._on_timeout_edited)
        self.timeout_input.returnPressed.connect(self._save)
        self.save_button.clicked.connect(self._save)
        self.autostart_checkbox.clicked.connect(self._toggle_autostart)
        self.language_selector.currentIndexChanged.connect(self._apply_language)
        self.tray.activated.connect(self._on_tray_activated)
        self.tray_toggle_action.triggered.connect(self.toggle_visibility)
        self.tray_quit_action.triggered.connect(self.quit)

    def _set_status(self, key: str) -> None:
        self._status_key = key
        self.status_label.setText(self._t(key))

    def _set_controls_enabled(self, enabled: bool) -> None:
        self.timeout_input.setEnabled(enabled)
        self.save_button.setEnabled(enabled and not self._save_pending)
        self.autostart_checkbox.setEnabled(enabled and not self._toggle_pending)

    def _submit(self, operation: str, coro: Coroutine[Any, Any, object]) -> None:
        future = self._loop.submit(coro)

        def done(completed: Future[object]) -> None:
            try:
                result = completed.result()
            except Exception as exc:
                logger.exception("Settings operation %s failed", operation)
                self._signals.operation_failed.emit(operation, str(exc))
                return
            self._signals.operation_finished.emit(operation, result)

        future.add_done_callback(done)

    def start(self) -> None:
        self._submit(OP_INITIALIZE, self._runtime.bridge.initialize())

    def _on_timeout_edited(self, text: str) -> None:
        minutes = coerce_minutes(text)
        bridge = self._runtime.bridge
        self._loop.call(lambda: bridge.edit_timeout(minutes))

    def _save(self) -> None:
        if self._save_pending or not self._state.initialized:
            return
        minutes = coerce_minutes(self.timeout_input.text())
        self._save_pending = True
        self.save_button.setEnabled(False)
        self._set_status("status_saving")
        self._submit(OP_SAVE, self._runtime.bridge.save(minutes))

    def _toggle_autostart(self) -> None:
        # The box follows the registry, never the click: restore it until the result arrives.
        self.autostart_checkbox.setChecked(self._state.autostart_enabled)
        if self._toggle_pending or not self._state.initialized:
            return
        self._toggle_pending = True
        self.autostart_checkbox.setEnabled(False)
        self._set_status("status_autostart_busy")
        self._submit(OP_TOGGLE, self._runtime.bridge.toggle_autostart())

    def _on_state_changed(self, state: object) -> None:
        if not isinstance(state, SettingsState):
            return
        self._state = state
        if coerce_minutes(self.timeout_input.text()) != state.timeout_minutes:
            self.timeout_input.setText(str(state.timeout_minutes))
        self.autostart_checkbox.setChecked(state.autostart_enabled)

    def _on_operation_finished(self, operation: str, result: object) -> None:
        if operation == OP_INITIALIZE:
            if isinstance(result, SettingsState):
                self._on_state_changed(result)
            self._set_controls_enabled(True)
            self._set_status("status_ready")
            return

        if not isinstance(result, OperationResult):
            self._on_operation_failed(operation, f"Unexpected result: {result!r}")
            return

        self._on_state_changed(result.state)
        if operation == OP_SAVE:
            self._finish_save()
            if result.ok:
                QMessageBox.information(
                    self, self._t("save_success_title"), self._t("save_success_body")
                )
            else:
                QMessageBox.warning(
                    self,
                    self._t("save_error_title"),
                    self._t("save_error_body", error=result.message),
                )
            return

        self._finish_toggle()
        if not result.ok:
            QMessageBox.warning(
                self,
                self._t("autostart_error_title"),
                self._t("autostart_error_body", error=result.message),
            )

    def _on_operation_failed(self, operation: str, error: str) -> None:
        if operation == OP_INITIALIZE:
            self._set_controls_enabled(True)
            self._set_status("status_ready")
            return
        if operation == OP_SAVE:
            self._finish_save()
            QMessageBox.warning(
                self, self._t("save_error_title"), self._t("save_error_body", error=error)
            )
            return
        self._finish_toggle()
        QMessageBox.warning(
            self,
            self._t("autostart_error_title"),
            self._t("autostart_error_body", error=error),
        )

    def _finish_save(self) -> None:
        self._save_pending = False
        self.save_button.setEnabled(True)
        self._set_status("status_ready")

    def _finish_toggle(self) -> None:
        self._toggle_pending = False
        self.autostart_checkbox.setEnabled(True)
        self.autostart_checkbox.setChecked(self._state.autostart_enabled)
        self._set_status("status_ready")

    def _on_tray_activated(self, reason: QSystemTrayIcon.ActivationReason) -> None:
        if reason == QSystemTrayIcon.ActivationReason.Trigger:
            self.show_window()

    def show_window(self) -> None:
        self.show()
        self.raise_()
        self.activateWindow()

    def toggle_visibility(self) -> None:
        if self.isVisible():
            self.hide()
            return
        self.show_window()

    def quit(self) -> None:
        self._quitting = True
        self._unsubscribe()
        self.tray.hide()
        app = QApplication.instance()
        if app is not None:
            app.quit()

    def closeEvent(self, event: QCloseEvent | None) -> None:  # noqa: N802
        if event is None:
            return
        if self._quitting or not self.tray.isVisible():
            event.accept()
            return
        # Closing only hides the window; the tray keeps the app alive.
        self.hide()
        event.ignore()


def launch_gui(config_path: Path | None = None, *, minimized: bool = False) -> int:
    cfg = load_config(config_path)

    app = QApplication.instance()
    owns_app = app is None
    if app is None:
        app = QApplication(sys.argv)
    app.setQuitOnLastWindowClosed(not QSystemTrayIcon.isSystemTrayAvailable())

    runtime = open_runtime(cfg)
    loop = LoopThread()
    loop.start()
    try:
        window = SettingsWindow(runtime, loop, language=initial_language())
        window.start()
        if not minimized or not QSystemTrayIcon.isSystemTrayAvailable():
            window.show_window()
        if owns_app:
            return int(app.exec())
        return 0
    finally:
        if owns_app:
            loop.stop()
            runtime.close()
