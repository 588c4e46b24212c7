# SeeBorg - seeborg_logger.py
# Copyright (C) 2026 The SeeBorg Contributors

import logging
import sys
from datetime import datetime

# ANSI Color Codes
RESET = "\033[0m"
DIM = "\033[2m"
RED = "\033[91m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
MAGENTA = "\033[95m"      # Replies
CYAN = "\033[96m"         # Learning / saving
WHITE = "\033[97m"


class SeeBorgFormatter(logging.Formatter):
    """
    Colors each line by level first, then by what the message talks about,
    and stamps it with a 12-hour clock.
    """

    def format(self, record):
        timestamp = datetime.fromtimestamp(record.created).strftime("%I:%M:%S%p")

        msg = record.getMessage()
        if record.exc_info:
            msg = f"{msg}\n{self.formatException(record.exc_info)}"
        lower_msg = msg.lower()

        if record.levelno >= logging.ERROR:
            color = RED
            icon = "✖"
        elif record.levelno >= logging.WARNING:
            color = YELLOW
            icon = "!"
        elif "reply to" in lower_msg:
            color = MAGENTA
            icon = "»"
        elif "learned" in lower_msg or "saved" in lower_msg or "loaded" in lower_msg:
            color = CYAN
            icon = "✓"
        elif "starting" in lower_msg or "building" in lower_msg or "rebuilt" in lower_msg:
            color = GREEN
            icon = "⟳"
        else:
            color = WHITE
            icon = "•"

        formatted_time = f"{DIM}{timestamp}{RESET}"
        formatted_msg = f"{color}{icon} {msg}{RESET}"

        return f"{formatted_time} {formatted_msg}"


def setup_logger(level=logging.INFO):
    """Configures the root logger to use our custom formatter."""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Prevent adding multiple handlers if function is called twice
    if logger.hasHandlers():
        logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(SeeBorgFormatter())
    logger.addHandler(handler)

    # Keep Flask's per-request lines out of the console
    logging.getLogger("werkzeug").setLevel(logging.ERROR)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
