"""Matching detected frequencies against the strings of a tuning."""

import math
from typing import ClassVar, Optional, Tuple

from .logger import get_logger
from .note_types import MatchResult, PitchResult, TuningPreset, TuningStatus
from .note_utils import calculate_cents

# Get logger for this module
logger = get_logger(__name__)

NO_PITCH_ADVICE = "No pitch detected. Play a string and hold the note."
TIMEOUT_ADVICE = "Timed out waiting for a note. Play a string and hold it steady."


class NoteMatcher:
    """
    Encapsulates logic for comparing a detected frequency to the target
    strings of a tuning, including octave-error correction and cents scoring.
    """

    # Plausible range of a guitar fundamental; anything outside is noise
    GUITAR_FREQ_MIN: ClassVar[float] = 70.0
    GUITAR_FREQ_MAX: ClassVar[float] = 1500.0

    # Within this many cents a string counts as in tune
    IN_TUNE_THRESHOLD: ClassVar[float] = 5.0

    # A string only qualifies as a match within one semitone
    SEMITONE_CENTS: ClassVar[float] = 100.0

    @staticmethod
    def cents(detected: float, target: float) -> float:
        return calculate_cents(detected, target)

    @classmethod
    def _nearest_string(
        cls, frequency: float, tuning: TuningPreset
    ) -> Optional[Tuple[int, str, float]]:
        """Nearest string within a semitone as (string_number, note_name, cents)."""
        best: Optional[Tuple[int, str, float]] = None
        for guitar_string in tuning.strings:
            cents = cls.cents(frequency, guitar_string.note.frequency)
            logger.debug(
                f"String {guitar_string.string_number} ({guitar_string.note}): "
                f"{frequency:.2f}Hz is {cents:+.1f} cents"
            )
            if abs(cents) > cls.SEMITONE_CENTS:
                continue
            if best is None or abs(cents) < abs(best[2]):
                best = (guitar_string.string_number, guitar_string.note.full_name, cents)
        return best

    @classmethod
    def match_string(cls, frequency: float, tuning: TuningPreset) -> Optional[MatchResult]:
        """
        Find the string of the tuning a frequency belongs to.

        Args:
            frequency: Detected frequency in Hz
            tuning: The tuning to match against

        Returns:
            MatchResult for the nearest string within a semitone, or None.
            A direct match always wins over an octave-corrected one; the
            corrected search doubles the frequency exactly once.
        """
        if frequency < cls.GUITAR_FREQ_MIN or frequency > cls.GUITAR_FREQ_MAX:
            logger.debug(f"{frequency:.2f}Hz outside guitar range, no match")
            return None

        octave_corrected = False
        frequency_used = frequency
        nearest = cls._nearest_string(frequency, tuning)

        if nearest is None:
            # Autocorrelation detectors often report one octave low
            frequency_used = frequency * 2.0
            nearest = cls._nearest_string(frequency_used, tuning)
            octave_corrected = nearest is not None
            if octave_corrected:
                logger.debug(f"Octave correction: {frequency:.2f}Hz -> {frequency_used:.2f}Hz")

        if nearest is None:
            return None

        string_number, note_name, cents = nearest
        return MatchResult(
            string_number=string_number,
            note_name=note_name,
            cents_off=round(cents, 1),
            frequency_used=frequency_used,
            octave_corrected=octave_corrected,
        )

    @classmethod
    def classify(cls, cents: float) -> TuningStatus:
        if abs(cents) <= cls.IN_TUNE_THRESHOLD:
            return TuningStatus.IN_TUNE
        return TuningStatus.FLAT if cents < 0 else TuningStatus.SHARP

    @staticmethod
    def advice(
        status: TuningStatus,
        cents: float,
        string_number: Optional[int],
        note_name: Optional[str],
    ) -> str:
        """Human-readable instruction for a reading."""
        if string_number is None or note_name is None:
            return NO_PITCH_ADVICE

        string_label = f"String {string_number} ({note_name})"
        # Halves round up: 6.5 cents reads as 7
        cents_abs = int(math.floor(abs(cents) + 0.5))

        if status is TuningStatus.IN_TUNE:
            return f"{string_label} is in tune!"
        if status is TuningStatus.FLAT:
            return f"{string_label} is {cents_abs} cents flat. Tune UP (tighten)."
        return f"{string_label} is {cents_abs} cents sharp. Tune DOWN (loosen)."

    @classmethod
    def build_pitch_result(
        cls, frequency: Optional[float], tuning: TuningPreset
    ) -> PitchResult:
        """
        Compose a PitchResult from an estimator reading.

        Args:
            frequency: Detected frequency in Hz, or None when nothing was heard
            tuning: The tuning to match against

        Returns:
            PitchResult; note, string and cents are None unless a string matched
        """
        if frequency is None:
            return PitchResult(
                frequency=None,
                note_name=None,
                cents_deviation=None,
                closest_string=None,
                in_tune=False,
                tuning_status=TuningStatus.FLAT,
                advice=NO_PITCH_ADVICE,
            )

        match = cls.match_string(frequency, tuning)
        if match is None:
            return PitchResult(
                frequency=round(frequency, 1),
                note_name=None,
                cents_deviation=None,
                closest_string=None,
                in_tune=False,
                tuning_status=TuningStatus.FLAT,
                advice=f"Detected {round(frequency)} Hz - not close to any target string.",
            )

        status = cls.classify(match.cents_off)
        return PitchResult(
            frequency=round(frequency, 1),
            note_name=match.note_name,
            cents_deviation=match.cents_off,
            closest_string=match.string_number,
            in_tune=status is TuningStatus.IN_TUNE,
            tuning_status=status,
            advice=cls.advice(status, match.cents_off, match.string_number, match.note_name),
            octave_corrected=match.octave_corrected,
        )

    @staticmethod
    def timeout_result() -> PitchResult:
        """Result reported when no stable reading arrives in time."""
        return PitchResult(
            frequency=None,
            note_name=None,
            cents_deviation=None,
            closest_string=None,
            in_tune=False,
            tuning_status=TuningStatus.FLAT,
            advice=TIMEOUT_ADVICE,
        )
