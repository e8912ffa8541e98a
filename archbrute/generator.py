from __future__ import annotations
from typing import Iterator, List, Optional, Sequence, Tuple, Union
from .alphabet import Alphabet
from .errors import ConfigError
from .strategies import GenerationStrategy, PermutationStrategy


class CandidateGenerator:
    """
    Wyższy poziom generatora: dla każdej skonfigurowanej długości (w kolejności
    z konfiguracji, bez sortowania) przechodzi kolejne alfabety, od najwęższego.
    Szerszy alfabet pomija kandydatów sprawdzonych już w węższym, więc żaden
    kandydat nie pojawia się dwa razy. Długości nigdy się nie przeplatają.
    """

    def __init__(self, alphabets: Union[Alphabet, Sequence[Alphabet]], lengths: Sequence[int]):
        if isinstance(alphabets, Alphabet):
            alphabets = [alphabets]
        self.alphabets = list(alphabets)
        if not self.alphabets:
            raise ConfigError("Lista alfabetów nie może być pusta")
        if len(set(self.alphabets)) != len(self.alphabets):
            raise ConfigError("Alfabety nie mogą się powtarzać")
        if not lengths:
            raise ConfigError("Lista długości nie może być pusta")
        if len(set(lengths)) != len(lengths):
            raise ConfigError(f"Długości nie mogą się powtarzać: {list(lengths)}")
        self.lengths = list(lengths)

        widest = max(a.base for a in self.alphabets)
        self.strategies: List[GenerationStrategy] = []
        for k in self.lengths:
            if k > widest:
                raise ConfigError(f"Długość {k} przekracza rozmiar alfabetu ({widest} znaków)")
            for pos, alphabet in enumerate(self.alphabets):
                # za krótki alfabet nie ma kandydatów tej długości
                if k <= alphabet.base:
                    self.strategies.append(PermutationStrategy(alphabet, k, exclude=self.alphabets[:pos]))

    def total_combinations(self) -> int:
        return sum(s.total_combinations() for s in self.strategies)

    def locate(self, password: str) -> Tuple[int, int]:
        """
        Zwraca (pozycja strumienia, indeks w jego pełnym porządku)
        dla strumienia, który generuje to hasło.
        """
        for pos, strategy in enumerate(self.strategies):
            if strategy.produces(password):
                return pos, strategy.index_of(password)
        raise ValueError(f"Hasło {password!r} nie pochodzi z żadnego skonfigurowanego strumienia")

    def streams(self, resume_after: Optional[str] = None) -> Iterator[Tuple[GenerationStrategy, Iterator[str]]]:
        """
        Leniwe strumienie kandydatów, po jednym na parę (długość, alfabet).
        Z resume_after pomija wszystko do tego kandydata włącznie.
        """
        first, start = 0, 0
        if resume_after is not None:
            first, start = self.locate(resume_after)
            start += 1
        for pos, strategy in enumerate(self.strategies):
            if pos < first:
                continue
            yield strategy, strategy.generate(start if pos == first else 0)

    def __iter__(self) -> Iterator[str]:
        for _, stream in self.streams():
            yield from stream

    def __repr__(self) -> str:
        return f"CandidateGenerator({self.alphabets!r}, lengths={self.lengths})"


def lengths_from_string(raw: str) -> List[int]:
    """'6,1,2' -> [6, 1, 2]; zakresy '1-4' rozwijane rosnąco."""
    lengths: List[int] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            if "-" in part:
                lo, hi = (int(x) for x in part.split("-", 1))
                if hi < lo:
                    raise ConfigError(f"Niepoprawny zakres długości: {part!r}")
                lengths.extend(range(lo, hi + 1))
            else:
                lengths.append(int(part))
        except ValueError:
            raise ConfigError(f"Niepoprawna długość: {part!r}") from None
    return lengths
