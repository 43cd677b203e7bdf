# stock_reuse/logger.py
# Prefix logger for engine runs.
#   info/warn/error  - run summaries and input problems
#   debug            - one line per committed placement (needs verbose)
# child(tag) gives a tier-scoped logger, e.g. "[REUSE:market]", that shares the
# parent's switches.

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Optional, TextIO


@dataclass
class Logger:
    enabled: bool = True
    verbose: bool = False
    prefix: str = "[REUSE]"
    parent: Optional["Logger"] = None

    def _on(self) -> bool:
        return self.parent._on() if self.parent is not None else self.enabled

    def _verbose(self) -> bool:
        return self.parent._verbose() if self.parent is not None else self.verbose

    def _emit(self, stream: TextIO, msg: str) -> None:
        print(f"{self.prefix} {msg}", file=stream)

    def child(self, tag: str) -> "Logger":
        return Logger(prefix=f"{self.prefix.rstrip(']')}:{tag}]", parent=self)

    def debug(self, msg: str) -> None:
        if self._on() and self._verbose():
            self._emit(sys.stdout, msg)

    def info(self, msg: str) -> None:
        if self._on():
            self._emit(sys.stdout, msg)

    def warn(self, msg: str) -> None:
        if self._on():
            self._emit(sys.stderr, f"WARNING: {msg}")

    def error(self, msg: str) -> None:
        self._emit(sys.stderr, f"ERROR: {msg}")


# Global default logger
LOGGER = Logger(enabled=True)


def set_enabled(flag: bool) -> None:
    LOGGER.enabled = bool(flag)


def set_verbose(flag: bool) -> None:
    LOGGER.verbose = bool(flag)


def get_logger() -> Logger:
    return LOGGER
