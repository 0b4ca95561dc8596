"""Audible playback of rendered chord files.

The music theory modules only produce note names.  This module is the
collaborator that turns a MIDI file written by
:func:`chord_sense.midi_io.create_chord_midi` into sound, either in-process
with FluidSynth or by handing the file to the operating system's player.

Example usage
-------------
>>> from chord_sense.playback import play_midi
>>> play_midi("round.mid")

FluidSynth needs a SoundFont (SF2).  Pass one via ``soundfont``, set the
``SOUND_FONT`` environment variable, or rely on the platform default.  The
``CHORD_SENSE_PLAYER`` environment variable overrides the external player
used by :func:`open_default_player`.
"""

# Revision note
# -------------
# ``open_default_player`` checks the return code of the player subprocess and
# raises ``MidiPlaybackError`` with its stderr on failure.  Temporary file
# cleanup is best effort so it never masks a playback error.

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import sys
from typing import List, Optional

from .midi_io import DRONE_CHANNEL

__all__ = [
    "MidiPlaybackError",
    "play_midi",
    "open_default_player",
]

logger = logging.getLogger(__name__)

# Channels written by ``create_chord_midi``: chords on 0, the drone on 1.
_CHORD_CHANNELS = (0, DRONE_CHANNEL)


class MidiPlaybackError(RuntimeError):
    """Raised when a chord file cannot be made audible."""


def _resolve_soundfont(sf: Optional[str]) -> str:
    """Return the SoundFont path to synthesise with.

    The explicit argument wins, then ``SOUND_FONT``, then a default for the
    current platform.  ``~`` and environment variables are expanded.

    Raises
    ------
    MidiPlaybackError
        If the chosen file does not exist.
    """

    candidate = sf or os.environ.get("SOUND_FONT")
    if not candidate:
        if sys.platform.startswith("win"):
            candidate = r"C:\\Windows\\System32\\drivers\\gm.dls"
        elif sys.platform == "darwin":
            candidate = "/Library/Audio/Sounds/Banks/FluidR3_GM.sf2"
        else:
            candidate = "/usr/share/sounds/sf2/FluidR3_GM.sf2"

    candidate = os.path.expanduser(os.path.expandvars(candidate))
    if not os.path.isfile(candidate):
        raise MidiPlaybackError(
            f"SoundFont not found at {candidate}. Pass --soundfont or set "
            "SOUND_FONT to a General MIDI .sf2 file to hear chords."
        )
    return candidate


def _new_synth():
    """Import pyFluidSynth and return a started ``Synth``."""

    try:
        import fluidsynth  # type: ignore
        synth = fluidsynth.Synth()
    except FileNotFoundError as exc:
        # pyFluidSynth raises this when libfluidsynth itself is absent.
        raise MidiPlaybackError(
            "The FluidSynth shared library was not found; install FluidSynth "
            "or run with --no-play."
        ) from exc
    except ImportError as exc:
        raise MidiPlaybackError(
            "pyFluidSynth is required for playback: pip install chord-sense[playback]"
        ) from exc

    try:
        synth.start()
    except Exception as exc:
        synth.delete()
        raise MidiPlaybackError(f"FluidSynth could not open an audio output: {exc}") from exc
    return synth


def play_midi(path: str, soundfont: Optional[str] = None) -> None:
    """Play the chord file ``path`` through FluidSynth and block until done.

    Both the chord and drone channels are bound to the General MIDI piano
    bank of the SoundFont before the file starts.

    Raises
    ------
    MidiPlaybackError
        If pyFluidSynth or the FluidSynth library is missing, the audio
        output cannot start, or the file cannot be played.
    """

    sf_path = _resolve_soundfont(soundfont)
    synth = _new_synth()
    try:
        sfid = synth.sfload(sf_path)
        for channel in _CHORD_CHANNELS:
            synth.program_select(channel, sfid, 0, 0)
        logger.debug("Playing %s with %s", path, sf_path)
        synth.play_midi_file(path)
    except Exception as exc:
        raise MidiPlaybackError(f"Could not play {path}: {exc}") from exc
    finally:
        synth.delete()


def _player_command(path: str, player_args: Optional[List[str]]) -> List[str]:
    if sys.platform.startswith("win"):
        return player_args + [path] if player_args else ["cmd", "/c", "start", "/wait", "", path]
    if sys.platform == "darwin":
        return ["open", "-W", "-a"] + player_args + [path] if player_args else ["open", "-W", path]
    return player_args + [path] if player_args else ["xdg-open", "--wait", path]


def open_default_player(path: str, *, delete_after: bool = False) -> None:
    """Open ``path`` with the system MIDI player and wait for it to exit.

    ``CHORD_SENSE_PLAYER`` may name a custom player command; it is split
    with :func:`shlex.split` so quoted paths containing spaces work.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    MidiPlaybackError
        If the player exits with a non-zero status.
    """

    if not os.path.isfile(path):
        raise FileNotFoundError(f"MIDI file not found: {path}")

    player = os.environ.get("CHORD_SENSE_PLAYER")
    player_args = shlex.split(player) if player else None

    cmd = _player_command(path, player_args)
    proc = subprocess.run(cmd, check=False, capture_output=True, text=True)
    if proc.returncode != 0 and cmd[:2] == ["xdg-open", "--wait"]:
        # Not every desktop implements ``--wait``; retry without it.
        proc = subprocess.run(
            ["xdg-open", path], check=False, capture_output=True, text=True
        )

    if proc.returncode != 0:
        logger.error("Player command failed: %s", proc.args)
        raise MidiPlaybackError(proc.stderr.strip() or "Player command failed")

    if delete_after:
        try:
            os.remove(path)
        except OSError as exc:
            logger.warning("Failed to delete temporary file %s: %s", path, exc)
