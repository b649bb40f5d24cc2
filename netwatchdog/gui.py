"""Desktop window for the network monitor, built on tkinter."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from .app import LogLevel, NetworkMonitorApp
from .config import Config

if TYPE_CHECKING:
    import tkinter as tk

REFRESH_MS = 500
WINDOW_TITLE = "Network Monitor"
ABOUT_TEXT = "Network Monitor v0.1.0"

_LEVEL_COLOURS = {
    LogLevel.INFO: "#7fb2ff",
    LogLevel.SUCCESS: "#2ecc40",
    LogLevel.WARNING: "#e0c000",
    LogLevel.ERROR: "#ff4136",
}
_STATUS_COLOURS = {"Online": "#2ecc40", "Offline": "#ff4136", "Unknown": "#999999"}


def status_rows(app: Any) -> list[tuple[str, str, str, str]]:
    """Rows of (target, address, status, response time) for the status grid."""
    rows = []
    for status in app.target_statuses.values():
        address = status.address if status.port is None else f"{status.address}:{status.port}"
        if status.is_ok():
            state = "Online"
        elif status.checked:
            state = "Offline"
        else:
            state = "Unknown"
        response = "-" if status.ping_rtt is None else f"{int(status.ping_rtt * 1000)} ms"
        rows.append((status.name, address, state, response))
    return rows


def settings_rows(config: Config) -> list[tuple[str, str]]:
    """Label and value pairs for the general settings grid."""
    return [
        ("Default Target:", config.default_target),
        ("Check Interval:", f"{config.check_interval_sec} sec"),
        ("Ping Timeout:", f"{config.ping_timeout_ms} ms"),
        ("Retry Count:", str(config.retry_count)),
        ("Log File:", config.log_file if config.log_file is not None else "None"),
        ("Notifications:", "Yes" if config.notification_enabled else "No"),
    ]


def target_rows(config: Config) -> list[tuple[str, str, str]]:
    """Rows of (name, address, port) for the network targets grid."""
    return [
        (t.name, t.address, "None" if t.port is None else str(t.port))
        for t in config.targets
    ]


def recovery_rows(config: Config) -> list[tuple[str, str, str]]:
    """Rows of (name, command, wait time) for the recovery actions grid."""
    return [
        (
            a.name,
            a.command,
            "None" if a.wait_after_ms is None else f"{a.wait_after_ms} ms",
        )
        for a in config.recovery_actions
    ]


def _configure_fonts(root: tk.Misc) -> None:
    from tkinter import font

    font.nametofont("TkDefaultFont").configure(size=12)
    font.nametofont("TkTextFont").configure(size=12)
    font.nametofont("TkFixedFont").configure(size=11)
    font.nametofont("TkMenuFont").configure(size=12)
    font.nametofont("TkHeadingFont").configure(size=12, weight="bold")
    root.option_add("*Font", "TkDefaultFont")


def _fill_tree(tree: Any, rows: list[tuple[str, ...]], tags: list[str] | None = None) -> None:
    tree.delete(*tree.get_children())
    for index, row in enumerate(rows):
        tree.insert("", "end", values=row, tags=(tags[index],) if tags else ())


class MonitorWindow:
    """Main window: menus, status, settings and log tabs, and a settings editor."""

    def __init__(self, root: tk.Tk, app: NetworkMonitorApp) -> None:
        import tkinter as tk
        from tkinter import ttk

        self.root = root
        self.app = app
        self._after_id: str | None = None
        self._shown_logs = 0
        self._editor: tk.Toplevel | None = None
        self._editor_text: tk.Text | None = None
        self._editor_error: tk.StringVar | None = None

        root.title(WINDOW_TITLE)
        root.geometry("800x600")
        root.minsize(640, 480)
        _configure_fonts(root)
        root.protocol("WM_DELETE_WINDOW", self._exit)

        menubar = tk.Menu(root)
        file_menu = tk.Menu(menubar, tearoff=False)
        file_menu.add_command(label="Edit Settings", command=self._open_editor)
        file_menu.add_command(label="Exit", command=self._exit)
        menubar.add_cascade(label="File", menu=file_menu)

        self._monitor_menu = tk.Menu(menubar, tearoff=False,
                                     postcommand=self._rebuild_monitor_menu)
        menubar.add_cascade(label="Monitoring", menu=self._monitor_menu)
        self._rebuild_monitor_menu()

        help_menu = tk.Menu(menubar, tearoff=False)
        help_menu.add_command(
            label="About", command=lambda: self.app.add_log(ABOUT_TEXT, LogLevel.INFO)
        )
        menubar.add_cascade(label="Help", menu=help_menu)
        root.config(menu=menubar)

        notebook = ttk.Notebook(root)
        notebook.pack(fill="both", expand=True)

        # Status tab
        status_tab = ttk.Frame(notebook, padding=8)
        notebook.add(status_tab, text="Status")
        ttk.Label(status_tab, text="Network Status", font=("TkHeadingFont", 18)).pack(anchor="w")
        controls = ttk.Frame(status_tab)
        controls.pack(fill="x", pady=4)
        self._monitor_button = ttk.Button(controls, command=self._toggle_monitoring)
        self._monitor_button.pack(side="left")
        ttk.Button(controls, text="Run Recovery Actions",
                   command=self._run_recovery).pack(side="left", padx=6)
        self._recovery_label = ttk.Label(controls, text="")
        self._recovery_label.pack(side="left")
        ttk.Separator(status_tab).pack(fill="x", pady=4)
        self._status_tree = self._make_tree(
            status_tab, ("Target", "Address", "Status", "Response Time")
        )
        for state, colour in _STATUS_COLOURS.items():
            self._status_tree.tag_configure(state, foreground=colour)

        # Settings tab
        settings_tab = ttk.Frame(notebook, padding=8)
        notebook.add(settings_tab, text="Settings")
        ttk.Label(settings_tab, text="Settings", font=("TkHeadingFont", 18)).pack(anchor="w")
        ttk.Button(settings_tab, text="Edit Settings",
                   command=self._open_editor).pack(anchor="w", pady=4)
        ttk.Label(settings_tab, text="General Settings").pack(anchor="w")
        self._settings_tree = self._make_tree(settings_tab, ("Setting", "Value"), height=6)
        ttk.Label(settings_tab, text="Network Targets").pack(anchor="w")
        self._targets_tree = self._make_tree(settings_tab, ("Name", "Address", "Port"), height=4)
        ttk.Label(settings_tab, text="Recovery Actions").pack(anchor="w")
        self._recovery_tree = self._make_tree(
            settings_tab, ("Name", "Command", "Wait Time"), height=4
        )

        # Logs tab
        logs_tab = ttk.Frame(notebook, padding=8)
        notebook.add(logs_tab, text="Logs")
        ttk.Label(logs_tab, text="Logs", font=("TkHeadingFont", 18)).pack(anchor="w")
        ttk.Button(logs_tab, text="Clear Logs", command=self._clear_logs).pack(anchor="w", pady=4)
        self._log_text = tk.Text(logs_tab, state="disabled", wrap="word")
        self._log_text.pack(fill="both", expand=True)
        for level, colour in _LEVEL_COLOURS.items():
            self._log_text.tag_configure(level.value, foreground=colour)

        self.refresh()

    @staticmethod
    def _make_tree(parent: Any, columns: tuple[str, ...], height: int = 10) -> Any:
        from tkinter import ttk

        tree = ttk.Treeview(parent, columns=columns, show="headings", height=height)
        for column in columns:
            tree.heading(column, text=column)
            tree.column(column, stretch=True)
        tree.pack(fill="both", expand=True, pady=2)
        return tree

    def _rebuild_monitor_menu(self) -> None:
        menu = self._monitor_menu
        menu.delete(0, "end")
        if self.app.monitoring_active:
            menu.add_command(label="Stop", command=self._toggle_monitoring)
        else:
            menu.add_command(label="Start", command=self._toggle_monitoring)
        menu.add_separator()
        menu.add_command(label="Run Recovery Actions", command=self._run_recovery)

    def _toggle_monitoring(self) -> None:
        if self.app.monitoring_active:
            self.app.stop_monitoring()
        else:
            self.app.start_monitoring()
        self.refresh()

    def _run_recovery(self) -> None:
        if not self.app.recovery_in_progress:
            self.app.perform_recovery()
        self.refresh()

    def _clear_logs(self) -> None:
        self.app.clear_logs()
        self._shown_logs = 0
        self._log_text.configure(state="normal")
        self._log_text.delete("1.0", "end")
        self._log_text.configure(state="disabled")

    def _open_editor(self) -> None:
        import tkinter as tk
        from tkinter import ttk

        self.app.open_config_editor()
        if not self.app.show_config_editor:
            self.refresh()
            return
        if self._editor is not None:
            self._editor.lift()
        else:
            editor = tk.Toplevel(self.root)
            editor.title("Settings Editor")
            editor.geometry("600x400")
            editor.resizable(False, False)
            editor.protocol("WM_DELETE_WINDOW", self._cancel_editor)
            self._editor_error = tk.StringVar(value="")
            ttk.Label(editor, textvariable=self._editor_error,
                      foreground=_LEVEL_COLOURS[LogLevel.ERROR]).pack(anchor="w")
            self._editor_text = tk.Text(editor, font="TkFixedFont", undo=True)
            self._editor_text.pack(fill="both", expand=True)
            buttons = ttk.Frame(editor)
            buttons.pack(fill="x")
            ttk.Button(buttons, text="Save", command=self._save_editor).pack(side="left")
            ttk.Button(buttons, text="Cancel", command=self._cancel_editor).pack(side="left")
            self._editor = editor
        self._editor_text.delete("1.0", "end")
        self._editor_text.insert("1.0", self.app.config_editor_text)
        self._editor_error.set("")

    def _close_editor_window(self) -> None:
        if self._editor is not None:
            self._editor.destroy()
        self._editor = None
        self._editor_text = None
        self._editor_error = None

    def _save_editor(self) -> None:
        if self._editor_text is None:
            return
        if self.app.save_config(self._editor_text.get("1.0", "end-1c")):
            self._close_editor_window()
        elif self._editor_error is not None:
            self._editor_error.set(self.app.config_save_error or "")
        self.refresh()

    def _cancel_editor(self) -> None:
        self.app.close_config_editor()
        self._close_editor_window()

    def _exit(self) -> None:
        if self._after_id is not None:
            self.root.after_cancel(self._after_id)
            self._after_id = None
        self.app.stop_monitoring()
        self.root.destroy()

    def refresh(self) -> None:
        """Bring every widget up to date with the application state."""
        if self._after_id is not None:
            self.root.after_cancel(self._after_id)
            self._after_id = None

        self.app.poll_recovery()

        self._monitor_button.configure(
            text="Stop Monitoring" if self.app.monitoring_active else "Start Monitoring"
        )
        self._recovery_label.configure(
            text="Recovery in progress..." if self.app.recovery_in_progress else ""
        )

        rows = status_rows(self.app)
        _fill_tree(self._status_tree, rows, [row[2] for row in rows])
        config = self.app.config
        _fill_tree(self._settings_tree, settings_rows(config))
        _fill_tree(self._targets_tree, target_rows(config))
        _fill_tree(self._recovery_tree, recovery_rows(config))

        logs = self.app.logs
        if len(logs) < self._shown_logs:
            self._shown_logs = 0
            self._log_text.configure(state="normal")
            self._log_text.delete("1.0", "end")
            self._log_text.configure(state="disabled")
        if len(logs) > self._shown_logs:
            self._log_text.configure(state="normal")
            for message, level in logs[self._shown_logs:]:
                self._log_text.insert("end", message + "\n", level.value)
            self._log_text.configure(state="disabled")
            self._log_text.see("end")
            self._shown_logs = len(logs)

        self._after_id = self.root.after(REFRESH_MS, self.refresh)


def run_gui(config_path: str | Path) -> None:
    """Open the monitor window and run until it is closed."""
    import tkinter as tk

    app = NetworkMonitorApp(config_path)
    root = tk.Tk()
    MonitorWindow(root, app)
    try:
        root.mainloop()
    finally:
        app.stop_monitoring()