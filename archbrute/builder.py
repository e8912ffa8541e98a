from __future__ import annotations
from typing import List, Optional, Sequence
from .alphabet import Alphabet
from .coordinator import SearchCoordinator
from .errors import ConfigError
from .generator import CandidateGenerator
from .logger import SearchLogger
from .scheduler import BatchScheduler
from .verifier import Verifier


class SearchBuilder:
    """Builder do składania koordynatora z generatora, harmonogramu i weryfikatora."""

    def __init__(self):
        self._alphabets: List[Alphabet] = []
        self._lengths: Sequence[int] = ()
        self._verifier: Optional[Verifier] = None
        self._concurrency: int = 8
        self._executor: str = "thread"
        self._report_every: int = 10_000
        self._logger: Optional[SearchLogger] = None
        self._resume_after: Optional[str] = None

    def with_alphabet(self, charset: str) -> "SearchBuilder":
        self._alphabets = [Alphabet(charset)]
        return self

    def with_presets(self, *names: str) -> "SearchBuilder":
        self._alphabets = [Alphabet.from_presets(names)]
        return self

    def with_tiers(self, *alphabets: Alphabet) -> "SearchBuilder":
        """Kolejne, coraz szersze alfabety; każdy pomija kandydatów poprzednich."""
        self._alphabets = list(alphabets)
        return self

    def with_lengths(self, *lengths: int) -> "SearchBuilder":
        if any(k < 1 for k in lengths):
            raise ConfigError("Niepoprawne długości")
        self._lengths = lengths
        return self

    def with_verifier(self, verifier: Verifier) -> "SearchBuilder":
        self._verifier = verifier
        return self

    def with_concurrency(self, limit: int, executor: str = "thread") -> "SearchBuilder":
        self._concurrency = limit
        self._executor = executor
        return self

    def with_reporting(self, every: int, logger: Optional[SearchLogger] = None) -> "SearchBuilder":
        self._report_every = every
        self._logger = logger
        return self

    def resuming_after(self, candidate: Optional[str]) -> "SearchBuilder":
        self._resume_after = candidate
        return self

    def build(self) -> SearchCoordinator:
        if self._verifier is None:
            raise ConfigError("Nie ustawiono weryfikatora")
        generator = CandidateGenerator(self._alphabets or [Alphabet()], self._lengths)
        scheduler = BatchScheduler(self._verifier, self._concurrency, self._executor)
        return SearchCoordinator(
            generator,
            scheduler,
            report_every=self._report_every,
            logger=self._logger,
            resume_after=self._resume_after,
        )
