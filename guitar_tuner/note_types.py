"""Type definitions for the guitar tuner."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple

from .note_utils import midi_to_frequency

STRING_COUNT = 6


@dataclass(frozen=True)
class Note:
    """A target pitch: pitch class, octave, MIDI number and rounded frequency."""

    name: str  # Pitch class (e.g., 'E', 'Eb', 'F#')
    octave: int  # e.g. 2
    midi_number: int  # E2=40, A4=69
    frequency: float  # Hz, rounded to 2 decimals

    @classmethod
    def from_midi(cls, name: str, octave: int, midi_number: int) -> "Note":
        return cls(
            name=name,
            octave=octave,
            midi_number=midi_number,
            frequency=round(midi_to_frequency(midi_number), 2),
        )

    @property
    def full_name(self) -> str:
        return f"{self.name}{self.octave}"

    def __str__(self):
        return self.full_name


@dataclass(frozen=True)
class GuitarString:
    """A string position on the guitar and the note it should sound."""

    string_number: int  # 1-6, where 1 is the thinnest (highest) string
    note: Note


@dataclass(frozen=True)
class TuningPreset:
    """A named mapping from the six string positions to target notes."""

    id: str
    name: str
    description: str
    strings: Tuple[GuitarString, ...]

    def __post_init__(self):
        numbers = sorted(s.string_number for s in self.strings)
        if numbers != list(range(1, STRING_COUNT + 1)):
            raise ValueError(
                f"Tuning '{self.id}' must define strings 1-{STRING_COUNT} exactly once, got {numbers}"
            )

    def get_string(self, string_number: int) -> Optional[GuitarString]:
        for guitar_string in self.strings:
            if guitar_string.string_number == string_number:
                return guitar_string
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "strings": [
                {
                    "string_number": s.string_number,
                    "note": s.note.full_name,
                    "frequency": s.note.frequency,
                }
                for s in self.strings
            ],
        }


@dataclass(frozen=True)
class MatchResult:
    """The string a frequency was matched to."""

    string_number: int
    note_name: str  # Target note with octave (e.g., 'A2')
    cents_off: float  # Signed, rounded to 1 decimal; positive is sharp
    frequency_used: float  # Raw frequency, or the doubled one after octave correction
    octave_corrected: bool = False


class TuningStatus(str, Enum):
    """Tuning direction of a reading."""

    FLAT = "flat"
    SHARP = "sharp"
    IN_TUNE = "in-tune"


@dataclass
class TuningProgress:
    """Strings confirmed in tune during the current session."""

    tuned_strings: List[int]  # Sorted descending (6 -> 1)
    tuned_count: int
    total_strings: int = STRING_COUNT
    all_in_tune: bool = False

    @classmethod
    def from_tuned(cls, tuned: Set[int]) -> "TuningProgress":
        return cls(
            tuned_strings=sorted(tuned, reverse=True),
            tuned_count=len(tuned),
            all_in_tune=len(tuned) == STRING_COUNT,
        )


@dataclass
class PitchResult:
    """User-facing snapshot of one pitch reading against the current tuning."""

    frequency: Optional[float]  # Detected frequency in Hz, rounded to 1 decimal
    note_name: Optional[str]  # Target note of the closest string (e.g., 'E2')
    cents_deviation: Optional[float]
    closest_string: Optional[int]
    in_tune: bool
    tuning_status: TuningStatus
    advice: str
    octave_corrected: bool = False
    progress: Optional[TuningProgress] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "frequency": self.frequency,
            "note_name": self.note_name,
            "cents_deviation": self.cents_deviation,
            "closest_string": self.closest_string,
            "in_tune": self.in_tune,
            "tuning_status": self.tuning_status.value,
            "advice": self.advice,
            "octave_corrected": self.octave_corrected,
        }
        if self.progress is not None:
            data.update(
                tuned_strings=list(self.progress.tuned_strings),
                tuned_count=self.progress.tuned_count,
                total_strings=self.progress.total_strings,
                all_in_tune=self.progress.all_in_tune,
            )
        return data


@dataclass
class SessionState:
    """The active tuning session. Owned by TuningSession."""

    tuning: TuningPreset
    started_at: datetime = field(default_factory=datetime.now)
    tuned_strings: Set[int] = field(default_factory=set)
