#!/usr/bin/env python3
import argparse
import sys
from pathlib import Path
from typing import List, Optional

# Dodajemy bibliotekę do ścieżki
sys.path.append(str(Path(__file__).parent.parent))

from archbrute.alphabet import PRESETS, parse_tiers
from archbrute.config import BACKENDS, from_env
from archbrute.coordinator import ProgressEvent, SearchState
from archbrute.errors import ConfigError, VerifierError
from archbrute.factory import SearchFactory
from archbrute.generator import lengths_from_string
from archbrute.logger import SearchLogger

EXIT_OK = 0
EXIT_CONFIG = 2
EXIT_VERIFIER = 3
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="archbrute",
        description="Przeszukuje wszystkie permutacje alfabetu, aż któraś otworzy archiwum.",
    )
    parser.add_argument("archive", nargs="?", help="Ścieżka do archiwum (lub ARCHBRUTE_ARCHIVE)")
    parser.add_argument("--alphabet", "-a",
                        help="Znaki wprost albo 'preset:lower|lower+numbers' (kolejne alfabety po '|', "
                             f"zestawy: {', '.join(PRESETS)})")
    parser.add_argument("--lengths", "-l", help="Długości w kolejności prób, np. '6,1,2' albo '1-4'")
    parser.add_argument("--concurrency", "-j", type=int, help="Ile prób naraz (domyślnie 8)")
    parser.add_argument("--report-every", type=int, help="Co ile prób wypisywać postęp (domyślnie 10000)")
    parser.add_argument("--backend", choices=BACKENDS, help="Sposób weryfikacji hasła")
    parser.add_argument("--7z", dest="seven_zip_bin", help="Ścieżka do programu 7z")
    parser.add_argument("--timeout", type=float, help="Limit czasu jednej próby w sekundach")
    parser.add_argument("--executor", choices=("thread", "process"), help="Pula wątków albo procesów")
    parser.add_argument("--log-file", help="Dopisuj komunikaty do pliku")
    parser.add_argument("--resume-after", help="Wznów po tym kandydacie")
    parser.add_argument("--env-file", help="Plik .env z konfiguracją")
    parser.add_argument("--quiet", "-q", action="store_true", help="Tylko wynik końcowy")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # === KONFIGURACJA (.env < argumenty) ===
    try:
        config = from_env(dotenv_path=args.env_file).merged(
            archive_path=Path(args.archive) if args.archive else None,
            alphabets=parse_tiers(args.alphabet) if args.alphabet else None,
            lengths=lengths_from_string(args.lengths) if args.lengths else None,
            concurrency_limit=args.concurrency,
            report_every=args.report_every,
            backend=args.backend,
            seven_zip_bin=args.seven_zip_bin,
            timeout=args.timeout,
            executor=args.executor,
            log_file=args.log_file,
            resume_after=args.resume_after,
        )
        config.validate()
        logger = SearchLogger(config.log_file, quiet=args.quiet)
    except ConfigError as e:
        print(f"[BŁĄD] {e}", file=sys.stderr)
        return EXIT_CONFIG
    except OSError as e:
        print(f"[BŁĄD] Nie można otworzyć pliku logu: {e}", file=sys.stderr)
        return EXIT_CONFIG

    with logger:
        try:
            coordinator = SearchFactory.from_config(config, logger)
        except ConfigError as e:
            logger.log("BŁĄD", str(e))
            return EXIT_CONFIG

        def report(event: ProgressEvent):
            logger.log("PROGRESS", f"{event.attempts}: {event.last_candidate} (długość {event.length})")

        coordinator.add_observer(report)

        try:
            result = coordinator.run()
        except VerifierError as e:
            logger.log("BŁĄD", f"Weryfikator nie działa, przerywam: {e}")
            return EXIT_VERIFIER
        except KeyboardInterrupt:
            logger.log("STOP", f"Przerwano po {coordinator.attempts} próbach")
            return EXIT_INTERRUPTED

        if result.state is SearchState.FOUND:
            logger.log("FOUND", f"Hasło: {result.password}", print_console=False)
            print(f"[FOUND] Hasło: {result.password} ({result.attempts} prób, {result.elapsed:.2f}s)")
        else:
            logger.log("EXHAUSTED", "Brak hasła", print_console=False)
            print(f"[EXHAUSTED] Nie znaleziono hasła ({result.attempts} prób, {result.elapsed:.2f}s)")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
