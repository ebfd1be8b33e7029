#!/usr/bin/env python3
"""
Calculator GUI

Tkinter front end for the calculator engine. The window only forwards taps
to backend.engine.CalculatorEngine and renders what it reports back:

- Display label bound to engine.display.
- 4-column keypad ("0" spans two columns), keyboard input routed through
  the same symbol aliases as the keypad.
- History overlay listing past calculations newest first, with Delete
  (selected rows) and Clear All.
"""

import logging
import sys
import tkinter as tk
from pathlib import Path
from typing import List, Optional

from backend.config import HISTORY_VIEW_LIMIT
from backend.engine import CalculatorEngine, normalize_symbol
from backend.history import HistoryItem

logger = logging.getLogger(__name__)


# -------------------------
# Visual theme / constants
# -------------------------
WINDOW_WIDTH = 360
WINDOW_HEIGHT = 560

BG = "#000000"          # main app background
PANEL_BG = "#17181A"    # header / overlay background
DIGIT_BG = "#333333"    # digit tiles
FUNC_BG = "#a5a5a5"     # C ± % tiles
OP_BG = "#ff9f0a"       # operator tiles
FG = "#FFFFFF"
FUNC_FG = "#000000"
MUTED_FG = "#8E8E93"

TITLE_FONT = ("Segoe UI", 12, "bold")
DISPLAY_FONT = ("Segoe UI", 48)
KEY_FONT = ("Segoe UI", 20)

# Keypad layout: (label, columnspan)
KEYPAD: List[List[tuple]] = [
    [("C", 1), ("±", 1), ("%", 1), ("÷", 1)],
    [("7", 1), ("8", 1), ("9", 1), ("×", 1)],
    [("4", 1), ("5", 1), ("6", 1), ("−", 1)],
    [("1", 1), ("2", 1), ("3", 1), ("+", 1)],
    [("0", 2), (".", 1), ("=", 1)],
]


def key_colors(label: str):
    """Return (background, foreground) for a keypad label."""
    if label in ("C", "±", "%"):
        return FUNC_BG, FUNC_FG
    if label in ("÷", "×", "−", "+", "="):
        return OP_BG, FG
    return DIGIT_BG, FG


def history_row(item: HistoryItem) -> str:
    return f"{item.expression} = {item.result}    {item.timestamp:%d %b %Y %H:%M:%S}"


# -------------------------
# Main application class
# -------------------------
class CalculatorGUI(tk.Tk):
    def __init__(self, engine: CalculatorEngine):
        super().__init__()

        # Window setup
        self.title("Calculator")
        self.geometry(f"{WINDOW_WIDTH}x{WINDOW_HEIGHT}")
        self.minsize(300, 460)
        self.configure(bg=BG)

        # Optional window icon (assets/app_icon.png next to the project root)
        if getattr(sys, "frozen", False):
            base_dir = Path(sys._MEIPASS)
        else:
            base_dir = Path(__file__).resolve().parent.parent
        icon_path = base_dir / "assets" / "app_icon.png"
        if icon_path.exists():
            # Keep a reference to the PhotoImage so it isn't garbage-collected
            self.icon = tk.PhotoImage(file=str(icon_path))
            self.iconphoto(True, self.icon)

        self.engine = engine
        self.history_window: Optional[tk.Toplevel] = None
        self.history_list: Optional[tk.Listbox] = None
        self.clear_all_btn: Optional[tk.Button] = None

        self._build_header()
        self._build_display()
        self._build_keypad()
        self._refresh_display()

        self.bind("<Key>", self._on_key, add="+")

    # -------------------------
    # Layout
    # -------------------------
    def _build_header(self):
        """Top header with the History button."""
        header = tk.Frame(self, bg=BG)
        header.pack(fill="x", side="top")
        self.history_btn = tk.Button(header, text="History", bg=PANEL_BG, fg=FG, relief="flat",
                                     font=TITLE_FONT, command=self.toggle_history)
        self.history_btn.pack(side="left", padx=12, pady=10)

    def _build_display(self):
        self.display_var = tk.StringVar()
        tk.Label(self, textvariable=self.display_var, bg=BG, fg=FG, anchor="e",
                 font=DISPLAY_FONT).pack(fill="x", side="top", padx=16, pady=(40, 8))

    def _build_keypad(self):
        """Grid of keypad tiles; every tile calls self.tap with its label."""
        pad = tk.Frame(self, bg=BG)
        pad.pack(fill="both", expand=True, padx=8, pady=8)
        for r, row in enumerate(KEYPAD):
            c = 0
            for label, span in row:
                bg, fg = key_colors(label)
                btn = tk.Button(pad, text=label, bg=bg, fg=fg, activebackground=bg,
                                relief="flat", font=KEY_FONT,
                                command=lambda l=label: self.tap(l))
                btn.grid(row=r, column=c, columnspan=span, sticky="nsew", padx=4, pady=4)
                c += span
            pad.grid_rowconfigure(r, weight=1)
        for c in range(4):
            pad.grid_columnconfigure(c, weight=1, uniform="key")

    # -------------------------
    # Input handling
    # -------------------------
    def tap(self, symbol: str):
        item = self.engine.tap(symbol)
        self._refresh_display()
        if item is not None:
            self._refresh_history()

    def _on_key(self, event):
        """Route keyboard input through the keypad symbol aliases."""
        symbol = normalize_symbol(event.char) if event.char else None
        if symbol is None:
            symbol = normalize_symbol(event.keysym)
        if symbol is None:
            return None
        self.tap(symbol)
        return "break"

    def _refresh_display(self):
        self.display_var.set(self.engine.display)

    # -------------------------
    # History overlay
    # -------------------------
    def toggle_history(self):
        """Open or close the history overlay window."""
        if self.history_window and tk.Toplevel.winfo_exists(self.history_window):
            self._close_history()
            return
        win = tk.Toplevel(self)
        win.title("History")
        win.geometry(f"{self.winfo_width()}x300+{self.winfo_rootx()}+{self.winfo_rooty() + self.winfo_height() - 300}")
        win.configure(bg=PANEL_BG)
        win.transient(self)
        win.protocol("WM_DELETE_WINDOW", self._close_history)
        self.history_window = win

        toolbar = tk.Frame(win, bg=PANEL_BG)
        toolbar.pack(fill="x", side="top")
        tk.Button(toolbar, text="Close", bg=PANEL_BG, fg=FG, relief="flat",
                  command=self._close_history).pack(side="left", padx=6, pady=6)
        self.clear_all_btn = tk.Button(toolbar, text="Clear All", bg=PANEL_BG, fg=FG, relief="flat",
                                       command=self._clear_history)
        self.clear_all_btn.pack(side="right", padx=6, pady=6)
        tk.Button(toolbar, text="Delete", bg=PANEL_BG, fg=FG, relief="flat",
                  command=self._delete_selected).pack(side="right", padx=6, pady=6)

        frm = tk.Frame(win, bg=PANEL_BG)
        frm.pack(fill="both", expand=True)
        lb = tk.Listbox(frm, bg="#0e0f10", fg=FG, selectmode="extended", activestyle="none")
        lb.pack(side="left", fill="both", expand=True, padx=6, pady=6)
        scrollbar = tk.Scrollbar(frm, command=lb.yview)
        lb.config(yscrollcommand=scrollbar.set)
        scrollbar.pack(side="right", fill="y")
        lb.bind("<Delete>", lambda e: self._delete_selected())
        self.history_list = lb

        self._refresh_history()

    def _refresh_history(self):
        """Refill the overlay from the engine's history (newest first)."""
        lb = self.history_list
        if lb is None:
            return
        lb.config(state="normal")
        lb.delete(0, "end")
        items = self.engine.history.items[:HISTORY_VIEW_LIMIT]
        if not items:
            lb.insert("end", "No history yet.")
            lb.itemconfig(0, fg=MUTED_FG)
            lb.config(selectmode="browse", state="disabled")
            self.clear_all_btn.config(state="disabled")
            return
        lb.config(selectmode="extended")
        for item in items:
            lb.insert("end", history_row(item))
        self.clear_all_btn.config(state="normal")

    def _delete_selected(self):
        if not self.engine.history or self.history_list is None:
            return
        offsets = list(self.history_list.curselection())
        if not offsets:
            return
        self.engine.delete_history(offsets)
        self._refresh_history()

    def _clear_history(self):
        self.engine.clear_history()
        self._refresh_history()

    def _close_history(self):
        """Close the history window if open."""
        if self.history_window:
            try:
                self.history_window.destroy()
            except tk.TclError:
                logger.debug("History window already destroyed")
            self.history_window = None
            self.history_list = None
            self.clear_all_btn = None
