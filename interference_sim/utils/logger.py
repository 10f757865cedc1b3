import os
from datetime import datetime


class Logger:
    def __init__(self, debug_mode: bool = True):
        self.debug_mode = debug_mode

    def _log(self, level: str, msg: str):
        now = datetime.now().strftime('%Y-%m-%d %H:%M:%S')
        print(f"[{now}] [{level}] {msg}")

    def set_debug(self, enabled: bool):
        self.debug_mode = enabled

    def debug(self, msg: str):
        if self.debug_mode:
            self._log("DEBUG", msg)

    def info(self, msg: str):
        self._log("INFO", msg)

    def warning(self, msg: str):
        self._log("WARNING", msg)

    def error(self, msg: str):
        self._log("ERROR", msg)


debug_mode = os.getenv("INTERFERENCE_DEBUG", "").lower() in ("1", "true", "yes")
logger = Logger(debug_mode)


def set_debug(enabled: bool):
    logger.set_debug(enabled)
