"""Catalog of guitar tunings.

Standard tuning reference:
    String 6 (low E):  E2 = MIDI 40 =  82.41 Hz
    String 5:          A2 = MIDI 45 = 110.00 Hz
    String 4:          D3 = MIDI 50 = 146.83 Hz
    String 3:          G3 = MIDI 55 = 196.00 Hz
    String 2:          B3 = MIDI 59 = 246.94 Hz
    String 1 (high E): E4 = MIDI 64 = 329.63 Hz
"""

from typing import List, Optional, Tuple

from .note_types import GuitarString, Note, TuningPreset

DEFAULT_TUNING_ID = "standard"


def _strings(*notes: Tuple[str, int, int]) -> Tuple[GuitarString, ...]:
    """Build strings 6 -> 1 from (name, octave, midi) triples given low to high."""
    return tuple(
        GuitarString(string_number=6 - i, note=Note.from_midi(name, octave, midi))
        for i, (name, octave, midi) in enumerate(notes)
    )


TUNING_PRESETS: Tuple[TuningPreset, ...] = (
    TuningPreset(
        id="standard",
        name="Standard",
        description="Standard tuning (E A D G B E)",
        strings=_strings(("E", 2, 40), ("A", 2, 45), ("D", 3, 50), ("G", 3, 55), ("B", 3, 59), ("E", 4, 64)),
    ),
    TuningPreset(
        id="drop-d",
        name="Drop D",
        description="Drop D tuning (D A D G B E) - 6th string lowered to D",
        strings=_strings(("D", 2, 38), ("A", 2, 45), ("D", 3, 50), ("G", 3, 55), ("B", 3, 59), ("E", 4, 64)),
    ),
    TuningPreset(
        id="half-step-down",
        name="Half Step Down",
        description="Eb tuning (Eb Ab Db Gb Bb Eb) - all strings down 1 semitone",
        strings=_strings(("Eb", 2, 39), ("Ab", 2, 44), ("Db", 3, 49), ("Gb", 3, 54), ("Bb", 3, 58), ("Eb", 4, 63)),
    ),
    TuningPreset(
        id="open-g",
        name="Open G",
        description="Open G tuning (D G D G B D) - strums a G major chord",
        strings=_strings(("D", 2, 38), ("G", 2, 43), ("D", 3, 50), ("G", 3, 55), ("B", 3, 59), ("D", 4, 62)),
    ),
    TuningPreset(
        id="open-d",
        name="Open D",
        description="Open D tuning (D A D F# A D) - strums a D major chord",
        strings=_strings(("D", 2, 38), ("A", 2, 45), ("D", 3, 50), ("F#", 3, 54), ("A", 3, 57), ("D", 4, 62)),
    ),
    TuningPreset(
        id="dadgad",
        name="DADGAD",
        description="DADGAD tuning (D A D G A D) - popular for Celtic music",
        strings=_strings(("D", 2, 38), ("A", 2, 45), ("D", 3, 50), ("G", 3, 55), ("A", 3, 57), ("D", 4, 62)),
    ),
)


def get_tuning_by_id(tuning_id: str) -> Optional[TuningPreset]:
    """Look up a tuning preset; None when the id is unknown."""
    for preset in TUNING_PRESETS:
        if preset.id == tuning_id:
            return preset
    return None


def get_tuning_ids() -> List[str]:
    return [preset.id for preset in TUNING_PRESETS]


def list_tunings() -> List[TuningPreset]:
    return list(TUNING_PRESETS)
