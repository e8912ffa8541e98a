from __future__ import annotations
import itertools
import math
from typing import Protocol, Iterator, Optional, Sequence
from .alphabet import Alphabet
from .errors import ConfigError


class GenerationStrategy(Protocol):
    """Protokół strategii generowania kandydatów dla jednej długości."""

    length: int
    alphabet: Alphabet

    def generate(self, start_idx: int = 0, count: Optional[int] = None) -> Iterator[str]:
        """Leniwie zwraca kandydatów z indeksów [start_idx, start_idx + count)."""
        ...

    def total_combinations(self) -> int:
        """Zwraca liczbę kandydatów dla tej długości."""
        ...

    def produces(self, password: str) -> bool:
        """Czy kandydat pojawia się w tym strumieniu."""
        ...

    def index_of(self, password: str) -> int:
        """Pozycja kandydata w strumieniu."""
        ...


class PermutationStrategy:
    """
    Wszystkie k-permutacje alfabetu (bez powtórzeń znaków) w porządku
    leksykograficznym względem kolejności znaków w alfabecie.

    Generowanie opiera się na itertools.permutations, więc w pamięci trzymany
    jest tylko bieżący stan permutacji, nigdy cała przestrzeń.

    exclude: węższe alfabety sprawdzone wcześniej; kandydaci złożeni wyłącznie
    z ich znaków są pomijani. Indeksy (generate, password_at, index_of)
    odnoszą się zawsze do pełnego porządku permutacji, bez pomijania.
    """

    def __init__(self, alphabet: Alphabet, length: int, exclude: Sequence[Alphabet] = ()):
        if length < 0:
            raise ConfigError(f"Długość nie może być ujemna: {length}")
        if length > alphabet.base:
            raise ConfigError(
                f"Długość {length} przekracza rozmiar alfabetu ({alphabet.base} znaków)"
            )
        self.alphabet = alphabet
        self.length = length
        self.exclude = list(exclude)
        self._excluded_sets = [frozenset(a.charset) for a in self.exclude]
        self._size = math.perm(alphabet.base, length)
        self._total = self._size - self._excluded_count()

    def _excluded_count(self) -> int:
        # włączania-wyłączania po częściach wspólnych z węższymi alfabetami
        own = set(self.alphabet.charset)
        shared = [own & s for s in self._excluded_sets]
        count = 0
        for r in range(1, len(shared) + 1):
            for group in itertools.combinations(shared, r):
                common = set.intersection(*group)
                count += (-1) ** (r + 1) * math.perm(len(common), self.length)
        return count

    def _excluded(self, combo) -> bool:
        chars = set(combo)
        return any(chars <= s for s in self._excluded_sets)

    def total_combinations(self) -> int:
        return self._total

    def generate(self, start_idx: int = 0, count: Optional[int] = None) -> Iterator[str]:
        if start_idx < 0:
            raise ValueError("start_idx must be >= 0")
        end_idx = None if count is None else start_idx + count
        perms = itertools.permutations(self.alphabet.charset, self.length)
        for combo in itertools.islice(perms, start_idx, end_idx):
            if self._excluded_sets and self._excluded(combo):
                continue
            yield "".join(combo)

    def produces(self, password: str) -> bool:
        return (
            len(password) == self.length
            and len(set(password)) == len(password)
            and all(c in self.alphabet for c in password)
            and not self._excluded(password)
        )

    def password_at(self, idx: int) -> str:
        """Kandydat o podanym indeksie (bez generowania poprzednich)."""
        if not 0 <= idx < self._size:
            raise IndexError("Indeks poza zakresem strategii")
        free = list(self.alphabet.charset)
        pwd = []
        for pos in range(self.length):
            # ile permutacji zaczyna się od każdego wyboru na tej pozycji
            block = math.perm(len(free) - 1, self.length - pos - 1)
            choice, idx = divmod(idx, block)
            pwd.append(free.pop(choice))
        return "".join(pwd)

    def index_of(self, password: str) -> int:
        """Odwrotność password_at."""
        if len(password) != self.length:
            raise ValueError(f"Hasło {password!r} nie ma długości {self.length}")
        free = list(self.alphabet.charset)
        idx = 0
        for pos, char in enumerate(password):
            if char not in free:
                raise ValueError(f"Hasło {password!r} nie jest permutacją alfabetu")
            choice = free.index(char)
            idx += choice * math.perm(len(free) - 1, self.length - pos - 1)
            free.pop(choice)
        return idx

    def __repr__(self) -> str:
        return f"PermutationStrategy({self.alphabet!r}, length={self.length}, total={self._total})"
