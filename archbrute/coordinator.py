from __future__ import annotations
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from .errors import ConfigError, SearchError
from .generator import CandidateGenerator
from .logger import SearchLogger
from .scheduler import BatchScheduler


class SearchState(Enum):
    IDLE = "idle"
    SEARCHING = "searching"
    FOUND = "found"
    EXHAUSTED = "exhausted"
    ABORTED = "aborted"


@dataclass(frozen=True)
class ProgressEvent:
    attempts: int
    length: int
    last_candidate: Optional[str]


@dataclass(frozen=True)
class SearchResult:
    state: SearchState
    password: Optional[str]
    attempts: int
    elapsed: float

    @property
    def found(self) -> bool:
        return self.state is SearchState.FOUND


ProgressObserver = Callable[[ProgressEvent], None]


class SearchCoordinator:
    """
    Prowadzi przeszukiwanie: długość po długości, paczka po paczce.
    Licznik prób i znalezione hasło należą wyłącznie do koordynatora
    i są zmieniane tylko w _on_batch / _record_found.
    """

    def __init__(self, generator: CandidateGenerator, scheduler: BatchScheduler,
                 report_every: int = 10_000, logger: Optional[SearchLogger] = None,
                 resume_after: Optional[str] = None):
        if report_every < 1:
            raise ConfigError(f"report_every musi być >= 1, jest {report_every}")
        self.generator = generator
        self.scheduler = scheduler
        self.report_every = report_every
        self.logger = logger
        self.resume_after = resume_after
        self.state = SearchState.IDLE
        self.attempts = 0
        self.password: Optional[str] = None
        self._observers: List[ProgressObserver] = []
        self._length = 0
        self._last_report = 0

    def add_observer(self, observer: ProgressObserver) -> "SearchCoordinator":
        self._observers.append(observer)
        return self

    def _log(self, tag: str, message: str):
        if self.logger:
            self.logger.log(tag, message)

    def _on_batch(self, batch: List[str]):
        self.attempts += len(batch)
        if self.attempts // self.report_every > self._last_report:
            self._last_report = self.attempts // self.report_every
            event = ProgressEvent(self.attempts, self._length, batch[-1])
            for observer in self._observers:
                observer(event)

    def _record_found(self, password: str):
        if self.password is not None:
            raise SearchError("Hasło zostało już zapisane")
        self.password = password
        self.state = SearchState.FOUND

    def run(self) -> SearchResult:
        if self.state is not SearchState.IDLE:
            raise SearchError(f"Wyszukiwanie już uruchomione (stan: {self.state.value})")
        self.state = SearchState.SEARCHING
        start = time.monotonic()
        self._log("START", f"{self.generator!r}: {self.generator.total_combinations()} kandydatów, "
                           f"współbieżność {self.scheduler.concurrency_limit}")
        if self.resume_after is not None:
            self._log("RESUME", f"Pomijam kandydatów do {self.resume_after!r} włącznie")

        try:
            with self.scheduler:
                for strategy, stream in self.generator.streams(self.resume_after):
                    self._length = strategy.length
                    self._log("LENGTH", f"Długość {strategy.length}: {strategy.total_combinations()} kandydatów "
                                        f"({strategy.alphabet!r})")
                    found = self.scheduler.run(stream, on_batch=self._on_batch)
                    if found is not None:
                        self._record_found(found)
                        for error in self.scheduler.suppressed_errors:
                            self._log("UWAGA", f"Pominięty błąd weryfikatora: {error}")
                        break
        except BaseException:
            self.state = SearchState.ABORTED
            raise

        if self.state is SearchState.SEARCHING:
            self.state = SearchState.EXHAUSTED
        return SearchResult(self.state, self.password, self.attempts, time.monotonic() - start)
