from __future__ import annotations
import itertools
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor, wait
from typing import Callable, Iterable, Iterator, List, Optional

from .errors import ConfigError, VerifierError
from .verifier import Outcome, Verifier


def iter_batches(candidates: Iterable[str], size: int) -> Iterator[List[str]]:
    """Tnie strumień na paczki po maksymalnie size kandydatów."""
    if size < 1:
        raise ConfigError("Rozmiar paczki musi być >= 1")
    it = iter(candidates)
    while True:
        batch = list(itertools.islice(it, size))
        if not batch:
            return
        yield batch


def _attempt(verifier: Verifier, candidate: str) -> Outcome:
    return verifier.attempt(candidate)


class BatchScheduler:
    """
    Uruchamia weryfikację paczkami: cała paczka idzie równolegle, a
    następna jest pobierana dopiero gdy wszystkie próby się zakończą.
    Sukces sprawdzany jest po opróżnieniu paczki, bez przerywania rodzeństwa.
    """

    EXECUTORS = {"thread": ThreadPoolExecutor, "process": ProcessPoolExecutor}

    def __init__(self, verifier: Verifier, concurrency_limit: int = 8, executor: str = "thread"):
        if concurrency_limit < 1:
            raise ConfigError("Limit współbieżności musi być >= 1")
        if executor not in self.EXECUTORS:
            raise ConfigError(f"Nieznany executor: {executor!r}")
        self.verifier = verifier
        self.concurrency_limit = concurrency_limit
        self.executor_kind = executor
        self._pool: Optional[Executor] = None
        self.suppressed_errors: List[VerifierError] = []

    def __enter__(self) -> "BatchScheduler":
        self._pool = self.EXECUTORS[self.executor_kind](max_workers=self.concurrency_limit)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=True)
            self._pool = None

    def dispatch(self, batch: List[str]) -> Optional[str]:
        """
        Weryfikuje jedną paczkę i zwraca pierwsze (w kolejności kandydatów)
        znalezione hasło. Błąd weryfikatora jest rzucany tylko wtedy, gdy
        żadna próba w paczce nie zakończyła się sukcesem; w przeciwnym razie
        trafia do suppressed_errors.
        """
        if self._pool is None:
            raise RuntimeError("BatchScheduler must be used as a context manager")
        futures = [self._pool.submit(_attempt, self.verifier, c) for c in batch]
        wait(futures)
        found = None
        errors: List[VerifierError] = []
        for candidate, future in zip(batch, futures):
            exc = future.exception()
            if exc is None:
                outcome = future.result()
                if outcome.success and found is None:
                    found = outcome.password
            elif isinstance(exc, VerifierError):
                errors.append(exc)
            else:
                error = VerifierError(f"Weryfikator rzucił {exc!r}", candidate)
                error.__cause__ = exc
                errors.append(error)
        if found is None and errors:
            raise errors[0]
        self.suppressed_errors.extend(errors)
        return found

    def run(self, candidates: Iterable[str],
            on_batch: Optional[Callable[[List[str]], None]] = None) -> Optional[str]:
        """
        Przechodzi przez strumień paczka po paczce. Zwraca znalezione hasło
        albo None po wyczerpaniu strumienia.
        """
        for batch in iter_batches(candidates, self.concurrency_limit):
            found = self.dispatch(batch)
            if on_batch is not None:
                on_batch(batch)
            if found is not None:
                return found
        return None
