"""Command line interface for Chord Sense.

Modification summary
--------------------
* Settings saved with ``--save-settings`` become the defaults for later runs;
  ``--settings-file`` points both reading and writing at a custom path.
* Playback failures are logged before falling back to the system's default
  MIDI player so users still hear chords while developers retain the
  traceback.
* Invalid keys, degrees or inversions are reported with a single error line
  and exit status ``1``.

Two sub-commands are provided:

``explore``
    Voice one or more degrees in a key, print the notes and write them to a
    MIDI file.  Every chord draws its own inversion.

``practice``
    Interactive ear-training loop.  Each round plays a random degree; type
    its name to guess, ``r`` to hear it again, ``n`` for the next chord and
    ``q`` to stop.  Only the first guess in a round counts towards the score.

Example
-------
Running ``python -m chord_sense explore I IV V --key G --inversions root,first
--output cadence.mid --play`` writes three chords in G major and plays them.
"""

from __future__ import annotations

import argparse
import logging
import os
import random
import sys
import tempfile
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from . import (
    DEFAULT_SETTINGS,
    DEGREE_NAMES,
    KEY_CHOICES,
    KEY_DISPLAY_NAMES,
    Inversion,
    create_chord_midi,
    drone_note,
    load_settings,
    save_settings,
)
from .generator import Chord, ExploreSession, PracticeSession
from .midi_io import _open_default_player
from .utils import parse_degree_list, parse_inversion_list, validate_key_choice

__all__ = ["run_cli", "main"]

_LISTINGS = {
    "--list-keys": lambda: KEY_CHOICES,
    "--list-degrees": lambda: DEGREE_NAMES,
    "--list-inversions": lambda: [i.value for i in Inversion],
}


def format_chord(chord: Iterable) -> str:
    return " ".join(str(p) for p in chord)


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--key", type=str, help="Major key (e.g. C, Eb, Gb) or 'Random'.")
    common.add_argument(
        "--inversions",
        type=str,
        help="Comma-separated inversions to draw from: root, first, second.",
    )
    common.add_argument("--drone", action="store_true", help="Sustain the key's root note under the chords")
    common.add_argument("--bpm", type=int, default=120, help="Tempo used for rendered chords (default: 120).")
    common.add_argument("--instrument", type=int, default=0, help="MIDI program number for the chords")
    common.add_argument("--soundfont", type=str, help="Path to a SoundFont (.sf2) file used for playback")
    common.add_argument("--seed", type=int, help="Random seed for reproducible choices")
    common.add_argument("--save-settings", action="store_true", help="Remember key, inversions and degrees")
    common.add_argument("--settings-file", type=str, help="Path to the JSON settings file")

    parser = argparse.ArgumentParser(
        prog="chord-sense",
        description="Practise hearing scale degrees of diatonic chords.",
    )
    parser.add_argument("--list-keys", action="store_true", help="List all supported keys and exit")
    parser.add_argument("--list-degrees", action="store_true", help="List all scale degrees and exit")
    parser.add_argument("--list-inversions", action="store_true", help="List all inversions and exit")
    sub = parser.add_subparsers(dest="command", required=True)

    explore = sub.add_parser("explore", parents=[common], help="Play chosen degrees")
    explore.add_argument("degrees", nargs="+", help="Degrees to voice, e.g. I IV V")
    explore.add_argument("--output", type=str, default="explore.mid", help="Output MIDI file path.")
    explore.add_argument("--play", action="store_true", help="Play the MIDI file after it is created")

    practice = sub.add_parser("practice", parents=[common], help="Guess the degree of played chords")
    practice.add_argument("--degrees", type=str, help="Comma-separated degrees to practise (default: all).")
    practice.add_argument("--rounds", type=int, default=0, help="Number of rounds, 0 for unlimited (default: 0).")
    practice.add_argument("--play", dest="play", action="store_true", default=True, help="Play each chord (default)")
    practice.add_argument("--no-play", dest="play", action="store_false", help="Print chord files instead of playing them")
    return parser


def _fail(message: str) -> None:
    logging.error(message)
    sys.exit(1)


def _preview(path: str, soundfont: Optional[str], *, delete_after: bool = False) -> None:
    """Play ``path``, falling back to the system player when FluidSynth fails."""

    try:
        from . import playback

        playback.play_midi(path, soundfont=soundfont)
    except Exception:  # noqa: BLE001 - broad to ensure fallback
        logging.exception(
            "FluidSynth playback failed; using system default player as fallback.",
        )
        _open_default_player(path, delete_after=delete_after)
        return
    if delete_after:
        try:
            os.remove(path)
        except OSError as exc:
            logging.warning("Failed to delete temporary file %s: %s", path, exc)


def _audition(chord: Chord, args: argparse.Namespace, drone=None) -> None:
    """Render ``chord`` to a temporary MIDI file and play it."""

    fd, path = tempfile.mkstemp(suffix=".mid", prefix="chord_sense_")
    os.close(fd)
    create_chord_midi([chord], path, bpm=args.bpm, program=args.instrument, drone=drone)
    if args.play:
        _preview(path, args.soundfont, delete_after=True)
    else:
        print(f"Chord written to {path}")


def _resolve_options(args: argparse.Namespace, settings: dict) -> None:
    """Fill ``args`` with validated key, inversions and degrees.

    Command line values win over saved settings, which win over
    :data:`DEFAULT_SETTINGS`.
    """

    try:
        args.key = validate_key_choice(args.key or settings.get("key") or DEFAULT_SETTINGS["key"])
    except ValueError as exc:
        _fail(str(exc))
    try:
        args.inversions = parse_inversion_list(
            args.inversions or settings.get("inversions") or DEFAULT_SETTINGS["inversions"]
        )
    except ValueError as exc:
        _fail(str(exc))
    try:
        if args.command == "practice":
            args.degrees = parse_degree_list(
                args.degrees or settings.get("degrees") or DEFAULT_SETTINGS["degrees"]
            )
        else:
            args.degrees = parse_degree_list(args.degrees)
    except ValueError as exc:
        _fail(str(exc))

    if args.bpm <= 0:
        _fail("BPM must be a positive integer.")
    if not 0 <= args.instrument <= 127:
        _fail("Instrument must be between 0 and 127.")
    if getattr(args, "rounds", 0) < 0:
        _fail("Rounds must be zero or a positive integer.")


def _run_explore(args: argparse.Namespace, rng: random.Random) -> None:
    session = ExploreSession(args.key, args.inversions, rng=rng)
    print(f"Key: {KEY_DISPLAY_NAMES[session.key]}")
    chords: List[Chord] = []
    for degree in args.degrees:
        chord = session.play(degree)
        chords.append(chord)
        print(f"{degree}: {format_chord(chord)}")

    drone = drone_note(session.key) if args.drone else None
    try:
        create_chord_midi(
            chords,
            args.output,
            bpm=args.bpm,
            program=args.instrument,
            drone=drone,
        )
    except OSError as exc:
        _fail(f"Could not write MIDI file: {exc}")
    if args.play:
        _preview(args.output, args.soundfont)


def _read_command(prompt: str) -> str:
    try:
        return input(prompt).strip()
    except EOFError:
        return "q"


def _run_practice(args: argparse.Namespace, rng: random.Random) -> None:
    session = PracticeSession(args.key, args.inversions, args.degrees, rng=rng)
    show_inversion = len(args.inversions) > 1
    prompt = f"Guess ({', '.join(args.degrees)}), r=repeat, n=next, q=quit: "
    played = 0

    while not args.rounds or played < args.rounds:
        current = session.next_round()
        played += 1
        drone = drone_note(current.key) if args.drone else None
        print(f"Round {played}: {KEY_DISPLAY_NAMES[current.key]}")
        _audition(current.target_chord, args, drone)

        while True:
            command = _read_command(prompt)
            if command == "q":
                _print_score(session)
                return
            if command == "n":
                break
            if command == "r":
                _audition(session.repeat(), args, drone)
                continue
            if command not in current.chords:
                print(f"Choose one of: {', '.join(current.degrees)}")
                continue

            result = session.guess(command)
            _audition(result.chord, args, drone)
            if result.scored:
                if result.correct:
                    print("Correct!")
                else:
                    print(f"Nope, it was {result.target}")
                if show_inversion:
                    print(f"Current inversion: {current.inversion.label}")

    _print_score(session)


def _print_score(session: PracticeSession) -> None:
    correct, attempted = session.score
    print(f"Score: {correct}/{attempted}")


def run_cli(
    argv: Optional[Sequence[str]] = None, *, rng: Optional[random.Random] = None
) -> None:
    """Parse ``argv`` (default ``sys.argv[1:]``) and run the chosen command.

    ``rng`` replaces the random source, which otherwise is a
    :class:`random.Random` seeded from ``--seed``.
    """

    argv = list(sys.argv[1:] if argv is None else argv)
    for flag, values in _LISTINGS.items():
        if flag in argv:
            print("\n".join(values()))
            return

    args = _build_parser().parse_args(argv)
    settings_path = Path(args.settings_file).expanduser() if args.settings_file else None
    settings = load_settings(settings_path)
    _resolve_options(args, settings)

    if args.save_settings:
        updated = dict(settings)
        updated["key"] = args.key
        updated["inversions"] = [i.value for i in args.inversions]
        if args.command == "practice":
            updated["degrees"] = args.degrees
        save_settings(updated, settings_path)

    rng = rng or random.Random(args.seed)
    if args.command == "explore":
        _run_explore(args, rng)
    else:
        _run_practice(args, rng)
    logging.info("Done.")


def main() -> None:
    """Entry point for the ``chord-sense`` console script."""

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    run_cli()
