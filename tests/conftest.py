import struct
import threading
import zlib

import pytest

from archbrute.errors import VerifierError
from archbrute.verifier import Outcome


class RecordingVerifier:
    """Zna hasło i zapisuje każdą próbę."""

    def __init__(self, password=None):
        self.password = password
        self.attempts = []
        self.lock = threading.Lock()

    def attempt(self, candidate):
        with self.lock:
            self.attempts.append(candidate)
        if candidate == self.password:
            return Outcome.found(candidate)
        return Outcome.failed()


class BrokenVerifier:
    def __init__(self):
        self.calls = 0
        self.lock = threading.Lock()

    def attempt(self, candidate):
        with self.lock:
            self.calls += 1
        raise VerifierError("7z: command not found", candidate)


@pytest.fixture
def recording_verifier():
    return RecordingVerifier


@pytest.fixture
def broken_verifier():
    return BrokenVerifier()


def _crc_update(crc, byte):
    return zlib.crc32(bytes([byte]), crc ^ 0xFFFFFFFF) ^ 0xFFFFFFFF


class _ZipCrypto:
    def __init__(self, password):
        self.keys = [0x12345678, 0x23456789, 0x34567890]
        for b in password:
            self._update(b)

    def _update(self, byte):
        k0, k1, k2 = self.keys
        k0 = _crc_update(k0, byte)
        k1 = ((k1 + (k0 & 0xFF)) * 134775813 + 1) & 0xFFFFFFFF
        k2 = _crc_update(k2, k1 >> 24)
        self.keys = [k0, k1, k2]

    def encrypt(self, data):
        out = bytearray()
        for b in data:
            temp = self.keys[2] | 2
            out.append(b ^ (((temp * (temp ^ 1)) >> 8) & 0xFF))
            self._update(b)
        return bytes(out)


def write_encrypted_zip(path, password, member="secret.txt", content=b"flag{permutations}", plain=None):
    """
    Archiwum ZIP (metoda stored, ZipCrypto), którego stdlib nie potrafi zapisać.
    plain: {nazwa: dane} dodatkowych, niezaszyfrowanych plików.
    """
    crc = zlib.crc32(content) & 0xFFFFFFFF
    header = bytes(range(11)) + bytes([crc >> 24])
    entries = [(member, 0x1, crc, _ZipCrypto(password.encode("utf-8")).encrypt(header + content), len(content))]
    for name, data in (plain or {}).items():
        entries.append((name, 0, zlib.crc32(data) & 0xFFFFFFFF, data, len(data)))

    dos_time, dos_date = 0, (40 << 9) | (1 << 5) | 1
    local, central = b"", b""
    for name, flags, crc, payload, size in entries:
        raw = name.encode("utf-8")
        central += struct.pack("<4s4B4HL2L5H2L", b"PK\001\002", 20, 3, 20, 0, flags, 0, dos_time, dos_date,
                               crc, len(payload), size, len(raw), 0, 0, 0, 0, 0o100644 << 16, len(local)) + raw
        local += struct.pack("<4s2B4HL2L2H", b"PK\003\004", 20, 0, flags, 0, dos_time, dos_date,
                             crc, len(payload), size, len(raw), 0) + raw + payload
    end = struct.pack("<4s4H2LH", b"PK\005\006", 0, 0, len(entries), len(entries), len(central), len(local), 0)
    with open(path, "wb") as f:
        f.write(local + central + end)
    return path


@pytest.fixture
def encrypted_zip(tmp_path):
    def make(password, name="locked.zip", plain=None):
        return write_encrypted_zip(tmp_path / name, password, plain=plain)
    return make
