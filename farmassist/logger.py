import os
import sys
import logging

# --------------------------------------------------------
# Shared logger for all Farm Assist modules
# --------------------------------------------------------
LOGGER_NAME = "farmassist"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Unknown level names fall back to INFO
if not isinstance(logging.getLevelName(LOG_LEVEL), int):
    LOG_LEVEL = "INFO"

logger = logging.getLogger(LOGGER_NAME)
logger.setLevel(LOG_LEVEL)

# Avoid duplicate handlers on reload
if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(LOG_LEVEL)

    formatter = logging.Formatter(
        '[%(asctime)s] [%(levelname)s] %(message)s',
        datefmt='%H:%M:%S'
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

logger.propagate = False  # uvicorn has its own handlers
