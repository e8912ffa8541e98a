import string
from typing import Iterable, Iterator, List

from .errors import ConfigError


PRESETS = {
    "lower": string.ascii_lowercase,
    "upper": string.ascii_uppercase,
    "numbers": string.digits,
    "symbols": "./-_!?@#$%^&*+=",
    "ascii": "".join(chr(i) for i in range(32, 127)),
}


class Alphabet:
    """Uporządkowany zbiór unikalnych znaków, z których budowane są hasła."""

    DEFAULT = PRESETS["lower"]

    def __init__(self, charset: str = None):
        self.charset = self.DEFAULT if charset is None else charset
        if not self.charset:
            raise ConfigError("Alfabet nie może być pusty")
        duplicates = sorted({c for c in self.charset if self.charset.count(c) > 1})
        if duplicates:
            raise ConfigError(f"Alfabet zawiera powtórzone znaki: {''.join(duplicates)!r}")
        self.base = len(self.charset)

    @classmethod
    def from_presets(cls, names: Iterable[str]) -> "Alphabet":
        """Skleja gotowe zestawy (np. lower+numbers), pomijając powtórzenia."""
        parts: List[str] = []
        for name in names:
            name = name.strip()
            if name not in PRESETS:
                raise ConfigError(f"Nieznany zestaw znaków: {name!r} (dostępne: {', '.join(PRESETS)})")
            parts.append(PRESETS[name])
        return cls("".join(dict.fromkeys("".join(parts))))

    def index(self, char: str) -> int:
        return self.charset.index(char)

    def __contains__(self, char: str) -> bool:
        return char in self.charset

    def __getitem__(self, index: int) -> str:
        return self.charset[index]

    def __len__(self) -> int:
        return self.base

    def __iter__(self) -> Iterator[str]:
        return iter(self.charset)

    def __eq__(self, other) -> bool:
        return isinstance(other, Alphabet) and other.charset == self.charset

    def __hash__(self) -> int:
        return hash(self.charset)

    def __repr__(self) -> str:
        return f"Alphabet('{self.charset[:10]}{'...' if len(self.charset) > 10 else ''}', base={self.base})"


def parse_tiers(spec: str) -> List[Alphabet]:
    """
    'preset:lower|lower+numbers' -> kolejne, coraz szersze alfabety;
    każda inna wartość -> jeden alfabet ze znaków podanych wprost.
    """
    if not spec.startswith("preset:"):
        return [Alphabet(spec)]
    tiers = [Alphabet.from_presets(part.split("+")) for part in spec[len("preset:"):].split("|")]
    if len(set(tiers)) != len(tiers):
        raise ConfigError(f"Powtórzony alfabet w {spec!r}")
    return tiers
