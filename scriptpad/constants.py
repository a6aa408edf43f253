"""Constants and configuration for the scriptpad editor."""


class EditorConstants:
    """Central configuration constants for the editor."""

    # Input polling
    POLL_INTERVAL = 0.05  # Seconds to wait for a key before re-checking cancellation
    LOCATION_TIMEOUT = 0.5  # Timeout for the cursor position report (seconds)

    # Layout
    RESERVED_ROWS = 1  # Status row under the editing area
    GUTTER_PADDING = 1  # Spaces between line number and text
    TAB_WIDTH = 4  # Spaces inserted for Tab
    TAB_STOP = 8  # Columns between tab stops when showing literal tabs

    # Key help shown on the status row
    RUN_HELP = "Ctrl+R to run"
    SAVE_HELP = "Ctrl+Alt+S to save"
    QUIT_HELP = "Ctrl+Q to quit"

    # Launcher
    INTERACTIVE_TARGET = "-"
    SCRIPT_SUFFIX = ".py"
    NO_INPUT_MESSAGE = "No input provided."
    FILE_NOT_FOUND_MESSAGE = "File not found: {}"
    NO_TARGET_MESSAGE = "No target file specified or no input provided."
    EDITOR_BANNER = "Interactive Python editor! {}."

    # Styles (blessed formatting attribute names)
    GUTTER_STYLE = "bright_blue"
    STATUS_STYLE = "bright_black"
