import subprocess
import zipfile

import pytest

from archbrute import verifier as verifier_module
from archbrute.errors import ConfigError, VerifierError
from archbrute.verifier import CallableVerifier, Outcome, SevenZipVerifier, ZipFileVerifier


def completed(returncode, stdout="", stderr=""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def fake_run(monkeypatch):
    calls = []
    replies = []

    def run(cmd, **kwargs):
        calls.append(cmd)
        reply = replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply

    monkeypatch.setattr(verifier_module.subprocess, "run", run)
    return calls, replies


def test_outcome_values():
    assert Outcome.found("x") == Outcome(True, "x")
    assert not Outcome.failed().success
    assert Outcome.failed().password is None


def test_seven_zip_success(fake_run):
    calls, replies = fake_run
    replies.append(completed(0, stdout="Everything is Ok"))
    v = SevenZipVerifier("flag.7z", binary="7za")
    assert v.attempt("pass") == Outcome.found("pass")
    assert calls == [["7za", "t", "-y", "-ppass", "flag.7z"]]


def test_seven_zip_wrong_password(fake_run):
    _, replies = fake_run
    replies.append(completed(2, stderr="ERROR: Wrong password : secret.txt"))
    replies.append(completed(2, stderr="ERROR: Data Error in encrypted file. Wrong password? : x"))
    v = SevenZipVerifier("flag.7z")
    assert v.attempt("nope") == Outcome.failed()
    assert v.attempt("nope2") == Outcome.failed()


def test_seven_zip_missing_binary(fake_run):
    _, replies = fake_run
    replies.append(FileNotFoundError(2, "No such file"))
    with pytest.raises(VerifierError) as info:
        SevenZipVerifier("flag.7z", binary="7z-missing").attempt("a")
    assert "7z-missing" in str(info.value)
    assert info.value.candidate == "a"


def test_seven_zip_timeout(fake_run):
    _, replies = fake_run
    replies.append(subprocess.TimeoutExpired(cmd="7z", timeout=1))
    with pytest.raises(VerifierError):
        SevenZipVerifier("flag.7z", timeout=1).attempt("a")


def test_seven_zip_unknown_failure_escalates(fake_run):
    _, replies = fake_run
    replies.append(completed(2, stderr="ERROR: flag.7z\nCan not open the file as archive"))
    with pytest.raises(VerifierError) as info:
        SevenZipVerifier("flag.7z").attempt("a")
    assert "Can not open the file as archive" in str(info.value)


def test_seven_zip_backs_off_on_too_many_open_files(fake_run):
    calls, replies = fake_run
    replies.extend([
        completed(2, stderr="ERROR: too many open files"),
        completed(2, stderr="ERROR: Too many open files"),
        completed(0),
    ])
    v = SevenZipVerifier("flag.7z", retries=3, backoff=0)
    assert v.attempt("abc").success
    assert len(calls) == 3


def test_seven_zip_gives_up_after_retries(fake_run):
    _, replies = fake_run
    replies.extend([completed(2, stderr="too many open files")] * 2)
    with pytest.raises(VerifierError):
        SevenZipVerifier("flag.7z", retries=1, backoff=0).attempt("abc")


def test_seven_zip_rejects_negative_retries():
    with pytest.raises(ConfigError):
        SevenZipVerifier("flag.7z", retries=-1)


def test_zipfile_verifier_on_encrypted_archive(encrypted_zip):
    path = encrypted_zip("dab")
    v = ZipFileVerifier(path)
    assert v.attempt("dab") == Outcome.found("dab")
    for wrong in ("abc", "bad", "dba", "x"):
        assert v.attempt(wrong) == Outcome.failed()


def test_zipfile_verifier_ignores_plain_members(encrypted_zip):
    # readme.txt jest mniejszy, ale bez szyfrowania przyjąłby każde hasło
    path = encrypted_zip("dab", plain={"readme.txt": b"hi"})
    v = ZipFileVerifier(path)
    assert v.attempt("wrong") == Outcome.failed()
    assert v.attempt("dab") == Outcome.found("dab")


def test_zipfile_verifier_needs_encrypted_member(tmp_path, encrypted_zip):
    path = tmp_path / "plain.zip"
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("big.txt", "x" * 1000)
        zf.writestr("small.txt", "y")
    with pytest.raises(VerifierError):
        ZipFileVerifier(path).attempt("whatever")

    mixed = encrypted_zip("ab", name="mixed.zip", plain={"readme.txt": b"hi"})
    with pytest.raises(VerifierError):
        ZipFileVerifier(mixed, member="readme.txt").attempt("ab")
    assert ZipFileVerifier(mixed, member="secret.txt").attempt("ab").success


def test_zipfile_verifier_errors(tmp_path):
    with pytest.raises(VerifierError):
        ZipFileVerifier(tmp_path / "missing.zip").attempt("a")

    junk = tmp_path / "junk.zip"
    junk.write_bytes(b"not a zip at all")
    with pytest.raises(VerifierError):
        ZipFileVerifier(junk).attempt("a")

    empty = tmp_path / "empty.zip"
    zipfile.ZipFile(empty, "w").close()
    with pytest.raises(VerifierError):
        ZipFileVerifier(empty).attempt("a")


def test_zipfile_verifier_unknown_member(encrypted_zip):
    with pytest.raises(VerifierError):
        ZipFileVerifier(encrypted_zip("ab"), member="other.txt").attempt("ab")


def test_callable_verifier(tmp_path):
    seen = []

    def attempt_unlock(archive_path, password):
        seen.append((archive_path, password))
        return password == "ok"

    v = CallableVerifier(tmp_path / "a.zip", attempt_unlock)
    assert v.attempt("ok").success
    assert not v.attempt("no").success
    assert seen[0] == (str(tmp_path / "a.zip"), "ok")


def test_callable_verifier_crash_is_escalated():
    def attempt_unlock(archive_path, password):
        raise IOError("device not ready")

    with pytest.raises(VerifierError) as info:
        CallableVerifier("a.zip", attempt_unlock).attempt("pw")
    assert isinstance(info.value.__cause__, OSError)
