import sys
import threading
from datetime import datetime
from typing import Optional, TextIO


class SearchLogger:
    """
    Komunikaty w stylu '[TAG] treść' na konsolę, opcjonalnie dopisywane
    ze znacznikiem czasu do pliku logu.
    """

    ALWAYS_SHOWN = ("BŁĄD",)

    def __init__(self, log_file: Optional[str] = None, stream: TextIO = None, quiet: bool = False):
        self.path = log_file
        self.stream = stream or sys.stdout
        self.quiet = quiet
        self.lock = threading.Lock()
        self._file = None
        if log_file:
            self._file = open(log_file, "a", encoding="utf-8")
            self._write_header()

    def _write_header(self):
        timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S')
        self._file.write(f"\n\n=== Nowa sesja {timestamp} ===\n")
        self._file.flush()

    def log(self, tag: str, message: str, print_console: bool = True):
        line = f"[{tag}] {message}"
        with self.lock:
            if self._file:
                timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S')
                self._file.write(f"[{timestamp}] {line}\n")
                self._file.flush()
            if print_console and (not self.quiet or tag in self.ALWAYS_SHOWN):
                print(line, file=self.stream)

    def close(self):
        if self._file:
            self._file.close()
            self._file = None

    def __enter__(self) -> "SearchLogger":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
