"""Retro window palette (navy frame, blue title bar, grey body)."""
from core.models import DeadlineStatus

WINDOW_GRAY = "#c0c0c0"
LIGHT_GRAY = "#eaeaea"
FRAME_NAVY = "#000080"
TITLE_BLUE = "#1d5fbf"
TITLE_FG = "white"
DESKTOP_BLUE = "#3a6ea5"

SUCCESS_COLOR = "#90EE90"
ERROR_COLOR = "#ff7f7f"
UPCOMING_COLOR = "#cfeeff"
UNKNOWN_COLOR = LIGHT_GRAY

EDIT_COLOR = "#f0ad4e"
DELETE_COLOR = "#d9534f"

FONT = ("Tahoma", 10)
FONT_BOLD = ("Tahoma", 10, "bold")
FONT_STRIKE = ("Tahoma", 10, "overstrike")
FONT_SMALL = ("Tahoma", 8)
FONT_TITLE = ("Tahoma", 11, "bold")

STATUS_COLORS = {
    DeadlineStatus.UPCOMING: UPCOMING_COLOR,
    DeadlineStatus.OVERDUE: ERROR_COLOR,
    DeadlineStatus.COMPLETED: SUCCESS_COLOR,
}


def status_color(status) -> str:
    """Row background for a DeadlineStatus (None means the deadline is unreadable)."""
    return STATUS_COLORS.get(status, UNKNOWN_COLOR)
