from __future__ import annotations
import os
import subprocess
import time
import zipfile
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Protocol, Union

from .errors import ConfigError, VerifierError


@dataclass(frozen=True)
class Outcome:
    """Wynik jednej próby: sukces (z hasłem) albo porażka."""

    success: bool
    password: Optional[str] = None

    @classmethod
    def found(cls, password: str) -> "Outcome":
        return cls(True, password)

    @classmethod
    def failed(cls) -> "Outcome":
        return cls(False)


class Verifier(Protocol):
    """Sprawdza, czy kandydat otwiera archiwum."""

    def attempt(self, candidate: str) -> Outcome:
        """Zwraca Outcome; VerifierError gdy samej próby nie da się wykonać."""
        ...


class SevenZipVerifier:
    """
    Testuje hasło narzędziem 7z w trybie 't' (test integralności), więc
    nic nie jest rozpakowywane na dysk.
    """

    WRONG_PASSWORD_MARKERS = ("wrong password", "data error in encrypted file", "crc failed in encrypted file")
    TOO_MANY_FILES_MARKER = "too many open files"

    def __init__(self, archive_path: Union[str, Path], binary: str = "7z", timeout: float = 30,
                 retries: int = 5, backoff: float = 0.1):
        if retries < 0:
            raise ConfigError(f"Liczba ponowień nie może być ujemna: {retries}")
        self.archive_path = str(archive_path)
        self.binary = binary
        self.timeout = timeout
        self.retries = retries
        self.backoff = backoff

    def command(self, candidate: str):
        return [self.binary, "t", "-y", f"-p{candidate}", self.archive_path]

    def attempt(self, candidate: str) -> Outcome:
        for retry in range(self.retries + 1):
            try:
                result = subprocess.run(
                    self.command(candidate),
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                    text=True,
                    timeout=self.timeout,
                )
            except FileNotFoundError:
                raise VerifierError(f"Nie znaleziono programu {self.binary!r} w PATH", candidate) from None
            except subprocess.TimeoutExpired:
                raise VerifierError(f"{self.binary} nie odpowiedział w ciągu {self.timeout}s", candidate) from None
            except OSError as e:
                raise VerifierError(f"Nie udało się uruchomić {self.binary}: {e}", candidate) from e

            if result.returncode == 0:
                return Outcome.found(candidate)

            output = f"{result.stdout}\n{result.stderr}".lower()
            if any(marker in output for marker in self.WRONG_PASSWORD_MARKERS):
                return Outcome.failed()
            if self.TOO_MANY_FILES_MARKER in output and retry < self.retries:
                time.sleep(self.backoff * (retry + 1))
                continue
            break

        raise VerifierError(
            f"{self.binary} zakończył się kodem {result.returncode}: {result.stderr.strip() or result.stdout.strip()}",
            candidate,
        )

    def __repr__(self) -> str:
        return f"SevenZipVerifier({self.archive_path!r}, binary={self.binary!r})"


class ZipFileVerifier:
    """Weryfikacja w procesie, modułem zipfile (tylko archiwa ZIP/ZipCrypto)."""

    ENCRYPTED = 0x1

    def __init__(self, archive_path: Union[str, Path], member: Optional[str] = None):
        self.archive_path = Path(archive_path)
        self.member = member

    def _pick_member(self, zf: zipfile.ZipFile) -> str:
        # zipfile ignoruje hasło przy niezaszyfrowanych plikach, każde by pasowało
        if self.member:
            try:
                info = zf.getinfo(self.member)
            except KeyError:
                raise VerifierError(f"Brak pliku {self.member!r} w archiwum") from None
            if not info.flag_bits & self.ENCRYPTED:
                raise VerifierError(f"Plik {self.member!r} nie jest zaszyfrowany")
            return self.member
        files = [i for i in zf.infolist() if not i.is_dir() and i.flag_bits & self.ENCRYPTED]
        if not files:
            raise VerifierError(f"Archiwum {self.archive_path} nie zawiera zaszyfrowanych plików")
        # najmniejszy plik = najszybsza próba
        return min(files, key=lambda i: i.file_size).filename

    def attempt(self, candidate: str) -> Outcome:
        try:
            with zipfile.ZipFile(self.archive_path) as zf:
                member = self._pick_member(zf)
                try:
                    zf.read(member, pwd=candidate.encode("utf-8"))
                except RuntimeError as e:
                    if "password" in str(e).lower():
                        return Outcome.failed()
                    raise VerifierError(f"Błąd odczytu {member!r}: {e}", candidate) from e
                except (zlib.error, zipfile.BadZipFile):
                    # złe hasło, które przeszło 1-bajtowy test nagłówka
                    return Outcome.failed()
        except (OSError, zipfile.BadZipFile) as e:
            raise VerifierError(f"Nie można otworzyć {self.archive_path}: {e}", candidate) from e
        return Outcome.found(candidate)

    def __repr__(self) -> str:
        return f"ZipFileVerifier({str(self.archive_path)!r})"


class CallableVerifier:
    """Adapter na zewnętrzną funkcję attempt_unlock(archive_path, password) -> bool."""

    def __init__(self, archive_path: Union[str, Path], attempt_unlock: Callable[[str, str], bool]):
        self.archive_path = os.fspath(archive_path)
        self.attempt_unlock = attempt_unlock

    def attempt(self, candidate: str) -> Outcome:
        try:
            ok = self.attempt_unlock(self.archive_path, candidate)
        except VerifierError:
            raise
        except Exception as e:
            raise VerifierError(f"attempt_unlock nie powiódł się: {e!r}", candidate) from e
        return Outcome.found(candidate) if ok else Outcome.failed()
