class ArchBruteError(Exception):
    """Bazowy wyjątek biblioteki."""


class ConfigError(ArchBruteError):
    """Niepoprawna konfiguracja, wykryta zanim ruszy jakakolwiek próba."""


class VerifierError(ArchBruteError):
    """Weryfikator nie mógł się wykonać (brak narzędzia, błąd I/O, timeout)."""

    def __init__(self, message: str, candidate: str = None):
        super().__init__(message)
        self.candidate = candidate


class SearchError(ArchBruteError):
    """Niepoprawne użycie koordynatora."""
