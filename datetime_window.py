#!/usr/bin/env python3
"""Show the current date and/or time in an always-on-top window."""

from __future__ import annotations

import logging
import re
import sys
from dataclasses import dataclass, replace
from typing import Iterable

from PyQt5.QtCore import QDateTime, QPoint, Qt, QTimer
from PyQt5.QtGui import QColor, QFont, QPalette
from PyQt5.QtWidgets import QAction, QApplication, QLabel, QMenu, QVBoxLayout, QWidget


log = logging.getLogger(__name__)

APP_ID = "datetime-window"
APP_VERSION = "1.0.0"
APP_NAME = "Show Current Date or Time in Window"
WINDOW_TITLE = "Date Time Zone"
LICENSE_NOTICE = f"{APP_ID} {APP_VERSION}.  Apache License or GNU GPL."
FORMAT_REFERENCE_URL = "https://doc.qt.io/qt-5/qdatetime.html#toString"

MIN_FRAME = 50
TIMER_DELAY_MS = 100

MIN_FONT_SIZE = 10
MAX_FONT_SIZE = 999
MAX_COLOR_VALUE = 255

DEFAULT_DATE_FORMAT = "'<html>'ddd d MMM yyyy'<br>'h:mm:ss AP t'</html>'"
DEFAULT_FONT_NAME = "Verdana"
DEFAULT_FONT_SIZE = 36
DEFAULT_PANEL_COLOR = (224, 224, 255)
DEFAULT_TEXT_COLOR = (51, 51, 51)
DEFAULT_WINDOW_RECT = (100, 100, 400, 150)

HELP_OPTIONS = ("?", "-?", "-h", "-help")

COLOR_PATTERN = re.compile(
    r"\s*\(\s*(\d{1,4})\s*,\s*(\d{1,4})\s*,\s*(\d{1,4})\s*\)\s*", re.ASCII
)
WINDOW_PATTERN = re.compile(
    r"\s*\(\s*(\d{1,5})\s*,\s*(\d{1,5})\s*,\s*(\d{1,5})\s*,\s*(\d{1,5})\s*\)\s*", re.ASCII
)
FONT_SIZE_PATTERN = re.compile(r"[0-9]+")

USAGE_LINES = [
    "",
    APP_NAME,
    "",
    "This is a graphical application.  You may give options on the command line:",
    "",
    "  -? = -help = show summary of command-line syntax",
    "  -b0 = hide window borders and controls; use full screen if -x1 given",
    "  -b1 = -b = show borders and controls on application window (default)",
    "  -d# = date and/or time format; see the Qt QDateTime::toString() description",
    "  -f# = text font name; example: -fVerdana",
    "  -p(#,#,#) = panel color or background in RGB; white is -p(255,255,255)",
    "  -s# = text font size from 10 to 999 points; example: -s24",
    "  -t(#,#,#) = text color or foreground in RGB; black is -t(0,0,0)",
    "  -w(#,#,#,#) = normal window position: left, top, width, height;",
    "      example: -w(50,50,700,500)",
    "  -x0 = normal or regular window, don't maximize (default)",
    "  -x1 = -x = maximize application window; full screen if -b0 given",
    "",
    "Text between single quotes in a -d format is shown as-is, so HTML such as",
    "'<html>' and '<br>' can be used to get more than one line.  Options",
    "containing spaces or punctuation may need to be quoted according to your",
    "system's command syntax.  The -d format letters are described at:",
    "",
    f"    {FORMAT_REFERENCE_URL}",
    "",
    LICENSE_NOTICE,
]


class OptionError(ValueError):
    """A command-line option that can't be used; the message is shown to the user."""


class HelpRequested(Exception):
    pass


@dataclass(frozen=True)
class DisplayConfiguration:
    show_borders: bool = True
    maximize: bool = False
    date_format: str = DEFAULT_DATE_FORMAT
    font_name: str = DEFAULT_FONT_NAME
    font_size: int = DEFAULT_FONT_SIZE
    panel_color: tuple[int, int, int] = DEFAULT_PANEL_COLOR
    text_color: tuple[int, int, int] = DEFAULT_TEXT_COLOR
    window_left: int = DEFAULT_WINDOW_RECT[0]
    window_top: int = DEFAULT_WINDOW_RECT[1]
    window_width: int = DEFAULT_WINDOW_RECT[2]
    window_height: int = DEFAULT_WINDOW_RECT[3]


def _is_mswin() -> bool:
    return sys.platform.startswith("win")


def _parse_font_size(text: str) -> int | None:
    if not FONT_SIZE_PATTERN.fullmatch(text):
        return None
    size = int(text)
    if size < MIN_FONT_SIZE or size > MAX_FONT_SIZE:
        return None
    return size


def _parse_color(text: str) -> tuple[int, int, int] | None:
    match = COLOR_PATTERN.fullmatch(text)
    if match is None:
        return None
    red, green, blue = (int(group) for group in match.groups())
    if max(red, green, blue) > MAX_COLOR_VALUE:
        return None
    return red, green, blue


def _parse_window_rect(text: str) -> tuple[int, int, int, int] | None:
    match = WINDOW_PATTERN.fullmatch(text)
    if match is None:
        return None
    left, top, width, height = (int(group) for group in match.groups())
    # Only the size is range checked; any left/top is passed on to the window manager.
    if width < MIN_FRAME or height < MIN_FRAME:
        return None
    return left, top, width, height


def parse_options(args: Iterable[str], mswin: bool | None = None) -> DisplayConfiguration:
    """Build a display configuration from command-line tokens.

    Tokens are handled left to right and the last one wins for each setting.
    Option letters are not case sensitive, but the text after ``-d`` and ``-f``
    is kept exactly as given. On Windows every ``-`` option may also be written
    with a leading ``/``.

    Raises HelpRequested for a help token and OptionError for the first token
    that can't be used; no configuration is produced in either case.
    """
    if mswin is None:
        mswin = _is_mswin()

    config = DisplayConfiguration()
    for arg in args:
        word = arg.lower()
        if not word:
            # Scripts often pass empty parameters.
            continue
        if mswin and word.startswith("/"):
            word = "-" + word[1:]

        if word in HELP_OPTIONS:
            raise HelpRequested()

        if word in ("-b", "-b1"):
            config = replace(config, show_borders=True)
        elif word == "-b0":
            config = replace(config, show_borders=False)

        elif word.startswith("-d"):
            config = replace(config, date_format=arg[2:])

        elif word.startswith("-f"):
            config = replace(config, font_name=arg[2:])

        elif word.startswith("-p"):
            color = _parse_color(word[2:])
            if color is None:
                raise OptionError(f"Invalid background color: {arg}")
            config = replace(config, panel_color=color)

        elif word.startswith("-s"):
            size = _parse_font_size(word[2:])
            if size is None:
                raise OptionError(f"Invalid font point size {arg}")
            config = replace(config, font_size=size)

        elif word.startswith("-t"):
            color = _parse_color(word[2:])
            if color is None:
                raise OptionError(f"Invalid foreground color: {arg}")
            config = replace(config, text_color=color)

        elif word.startswith("-w"):
            rect = _parse_window_rect(word[2:])
            if rect is None:
                raise OptionError(f"Invalid window position or size: {arg}")
            left, top, width, height = rect
            config = replace(
                config,
                window_left=left,
                window_top=top,
                window_width=width,
                window_height=height,
            )

        elif word in ("-x", "-x1"):
            config = replace(config, maximize=True)
        elif word == "-x0":
            config = replace(config, maximize=False)

        else:
            raise OptionError(f"Option not recognized: {arg}")

    return config


def usage_text() -> str:
    return "\n".join(USAGE_LINES)


def show_help() -> None:
    print(usage_text(), file=sys.stderr)


def load_options(args: Iterable[str], mswin: bool | None = None) -> DisplayConfiguration:
    """Parse options for the running process, exiting on help or bad input."""
    try:
        return parse_options(args, mswin=mswin)
    except HelpRequested:
        show_help()
        raise SystemExit(0)
    except OptionError as exc:
        print(exc, file=sys.stderr)
        show_help()
        raise SystemExit(1)


def format_datetime(pattern: str, moment: QDateTime) -> str:
    return moment.toString(pattern)


class DateTimeText:
    """Formatted date/time text that only reports a value when it changes."""

    def __init__(self, pattern: str):
        self.pattern = pattern
        self.old_text: str | None = None

    def refresh(self, moment: QDateTime | None = None) -> str | None:
        if moment is None:
            moment = QDateTime.currentDateTime()
        new_text = format_datetime(self.pattern, moment)
        if new_text == self.old_text:
            return None
        self.old_text = new_text
        return new_text


def _qcolor(values: tuple[int, int, int]) -> QColor:
    return QColor(values[0], values[1], values[2])


class DateTimeWindow(QWidget):
    def __init__(self, config: DisplayConfiguration):
        super().__init__()
        self.config = config
        self.date_text = DateTimeText(config.date_format)

        self._set_window_flags()
        self.setWindowTitle(WINDOW_TITLE)
        self.setFocusPolicy(Qt.StrongFocus)

        self.output_text = QLabel(self)
        self.output_text.setAlignment(Qt.AlignCenter)
        # Rich text labels keep mouse events for links unless interaction is off.
        self.output_text.setTextInteractionFlags(Qt.NoTextInteraction)
        self.output_text.setFont(QFont(config.font_name, config.font_size))
        self.output_text.setAutoFillBackground(True)
        palette = self.output_text.palette()
        palette.setColor(QPalette.Window, _qcolor(config.panel_color))
        palette.setColor(QPalette.WindowText, _qcolor(config.text_color))
        self.output_text.setPalette(palette)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self.output_text)

        self.menu_popup = QMenu(self)
        self.menu_cancel = QAction("Cancel", self)
        self.menu_exit = QAction("Exit", self)
        self.menu_popup.addAction(self.menu_cancel)
        self.menu_popup.addAction(self.menu_exit)
        self.menu_popup.triggered.connect(self.user_action)

        self.move(config.window_left, config.window_top)
        self.resize(config.window_width, config.window_height)

        self._refresh_text()
        self.update_timer = QTimer(self)
        self.update_timer.timeout.connect(self._refresh_text)
        self.update_timer.start(TIMER_DELAY_MS)

    def _set_window_flags(self) -> None:
        self.setWindowFlag(Qt.Window, True)
        self.setWindowFlag(Qt.WindowStaysOnTopHint, True)
        self.setWindowFlag(Qt.FramelessWindowHint, not self.config.show_borders)

    def _refresh_text(self, moment: QDateTime | None = None) -> None:
        new_text = self.date_text.refresh(moment)
        if new_text is not None:
            self.output_text.setText(new_text)

    def show_configured(self) -> None:
        if self.config.maximize and not self.config.show_borders:
            log.debug("showing full screen")
            self.showFullScreen()
        elif self.config.maximize:
            log.debug("showing maximized")
            self.showMaximized()
        else:
            log.debug(
                "showing at %d,%d size %dx%d",
                self.config.window_left,
                self.config.window_top,
                self.config.window_width,
                self.config.window_height,
            )
            self.show()
        self.activateWindow()
        self.setFocus()

    def show_popup_menu(self, global_pos: QPoint) -> None:
        self.menu_popup.exec_(global_pos)

    def user_action(self, action: QAction) -> None:
        if action is self.menu_cancel:
            # The popup menu closes by itself.
            return
        if action is self.menu_exit:
            self.exit_application()
            return
        log.error("user_action: unknown menu action %r", action.text())

    def exit_application(self) -> None:
        QApplication.instance().quit()

    def contextMenuEvent(self, event) -> None:  # noqa: N802 (Qt signature)
        self.show_popup_menu(event.globalPos())
        event.accept()

    def mouseReleaseEvent(self, event) -> None:  # noqa: N802 (Qt signature)
        # Right clicks arrive as context menu events.
        if event.button() == Qt.RightButton:
            event.ignore()
            return
        self.show_popup_menu(event.globalPos())
        event.accept()

    def keyPressEvent(self, event) -> None:  # noqa: N802 (Qt signature)
        if event.key() == Qt.Key_Escape:
            self.exit_application()
            event.accept()
            return
        super().keyPressEvent(event)


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(name)s: %(message)s")
    config = load_options(sys.argv[1:] if argv is None else argv)
    log.debug("display configuration: %s", config)

    app = QApplication.instance() or QApplication(sys.argv[:1])
    window = DateTimeWindow(config)
    window.show_configured()
    return app.exec_()


if __name__ == "__main__":
    raise SystemExit(main())
