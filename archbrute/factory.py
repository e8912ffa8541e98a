"""
factory.py
----------
Fabryka – z gotowej konfiguracji składa weryfikator i cały koordynator.
"""

from __future__ import annotations
from typing import Optional
from .builder import SearchBuilder
from .config import SearchConfig
from .coordinator import SearchCoordinator
from .errors import ConfigError
from .logger import SearchLogger
from .verifier import SevenZipVerifier, Verifier, ZipFileVerifier


class SearchFactory:
    """Statyczna fabryka – „jednolinijkowe” tworzenie wyszukiwania."""

    @staticmethod
    def verifier(config: SearchConfig) -> Verifier:
        if config.backend == "7z":
            return SevenZipVerifier(config.archive_path, binary=config.seven_zip_bin, timeout=config.timeout)
        if config.backend == "zip":
            return ZipFileVerifier(config.archive_path)
        raise ConfigError(f"Nieznany backend: {config.backend!r}")

    @staticmethod
    def from_config(config: SearchConfig, logger: Optional[SearchLogger] = None,
                    verifier: Optional[Verifier] = None) -> SearchCoordinator:
        config.validate()
        return (
            SearchBuilder()
            .with_tiers(*config.alphabets)
            .with_lengths(*config.lengths)
            .with_verifier(verifier or SearchFactory.verifier(config))
            .with_concurrency(config.concurrency_limit, config.executor)
            .with_reporting(config.report_every, logger)
            .resuming_after(config.resume_after)
            .build()
        )
