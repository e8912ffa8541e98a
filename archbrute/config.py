from __future__ import annotations
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import List, Mapping, Optional

from dotenv import load_dotenv

from .alphabet import Alphabet, parse_tiers
from .errors import ConfigError
from .generator import lengths_from_string

DEFAULT_CONCURRENCY = 8
DEFAULT_REPORT_EVERY = 10_000
DEFAULT_TIMEOUT = 30.0
BACKENDS = ("7z", "zip")
ENV_PREFIX = "ARCHBRUTE_"


@dataclass
class SearchConfig:
    archive_path: Optional[Path] = None
    alphabets: List[Alphabet] = field(default_factory=list)
    lengths: List[int] = field(default_factory=list)
    concurrency_limit: int = DEFAULT_CONCURRENCY
    report_every: int = DEFAULT_REPORT_EVERY
    backend: str = "7z"
    seven_zip_bin: str = "7z"
    timeout: float = DEFAULT_TIMEOUT
    executor: str = "thread"
    log_file: Optional[str] = None
    resume_after: Optional[str] = None

    def validate(self) -> "SearchConfig":
        """Wszystkie błędy konfiguracji wychodzą tutaj, przed pierwszą próbą."""
        if self.archive_path is None:
            raise ConfigError("Nie podano ścieżki do archiwum")
        if not Path(self.archive_path).is_file():
            raise ConfigError(f"Archiwum nie istnieje: {self.archive_path}")
        if not self.alphabets:
            raise ConfigError("Nie podano alfabetu")
        if len(set(self.alphabets)) != len(self.alphabets):
            raise ConfigError("Alfabety nie mogą się powtarzać")
        if not self.lengths:
            raise ConfigError("Nie podano długości haseł")
        if len(set(self.lengths)) != len(self.lengths):
            raise ConfigError(f"Długości nie mogą się powtarzać: {self.lengths}")
        widest = max(len(a) for a in self.alphabets)
        for k in self.lengths:
            if k < 1:
                raise ConfigError(f"Długość musi być dodatnia: {k}")
            if k > widest:
                raise ConfigError(f"Długość {k} przekracza rozmiar alfabetu ({widest} znaków)")
        if self.concurrency_limit < 1:
            raise ConfigError(f"Limit współbieżności musi być >= 1: {self.concurrency_limit}")
        if self.report_every < 1:
            raise ConfigError(f"Interwał raportowania musi być >= 1: {self.report_every}")
        if self.backend not in BACKENDS:
            raise ConfigError(f"Nieznany backend: {self.backend!r} (dostępne: {', '.join(BACKENDS)})")
        if self.timeout <= 0:
            raise ConfigError(f"Timeout musi być dodatni: {self.timeout}")
        if self.executor not in ("thread", "process"):
            raise ConfigError(f"Nieznany executor: {self.executor!r}")
        if self.resume_after is not None:
            if len(self.resume_after) not in self.lengths:
                raise ConfigError(f"Długość {self.resume_after!r} nie jest skonfigurowana")
            in_some_tier = any(all(c in a for c in self.resume_after) for a in self.alphabets)
            if not in_some_tier or len(set(self.resume_after)) != len(self.resume_after):
                raise ConfigError(f"{self.resume_after!r} nie jest kandydatem z tego alfabetu")
        return self

    def merged(self, **overrides) -> "SearchConfig":
        """Nadpisuje pola wartościami, które nie są None."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{ENV_PREFIX + name} musi być liczbą całkowitą: {raw!r}") from None


def from_env(env: Optional[Mapping[str, str]] = None, dotenv_path: Optional[str] = None) -> SearchConfig:
    """
    Konfiguracja z .env / zmiennych środowiskowych (ARCHBRUTE_*).
    Brakujące pola zostają None/domyślne; walidacja dopiero w validate().
    """
    if env is None:
        load_dotenv(dotenv_path)
        env = os.environ

    archive = env.get(ENV_PREFIX + "ARCHIVE")
    alphabet = env.get(ENV_PREFIX + "ALPHABET")
    lengths = env.get(ENV_PREFIX + "LENGTHS", "")
    timeout = env.get(ENV_PREFIX + "TIMEOUT")
    try:
        timeout = float(timeout) if timeout else DEFAULT_TIMEOUT
    except ValueError:
        raise ConfigError(f"{ENV_PREFIX}TIMEOUT musi być liczbą: {timeout!r}") from None

    return SearchConfig(
        archive_path=Path(archive) if archive else None,
        alphabets=parse_tiers(alphabet) if alphabet else [],
        lengths=lengths_from_string(lengths),
        concurrency_limit=_int(env, "CONCURRENCY", DEFAULT_CONCURRENCY),
        report_every=_int(env, "REPORT_EVERY", DEFAULT_REPORT_EVERY),
        backend=env.get(ENV_PREFIX + "BACKEND") or "7z",
        seven_zip_bin=env.get(ENV_PREFIX + "7Z") or "7z",
        timeout=timeout,
        executor=env.get(ENV_PREFIX + "EXECUTOR") or "thread",
        log_file=env.get(ENV_PREFIX + "LOG_FILE") or None,
    )
