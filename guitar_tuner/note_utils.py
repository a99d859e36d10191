"""Utility functions for working with musical notes and frequencies."""

from typing import List

import numpy as np

# Standard reference: A4 = 440Hz, MIDI note 69
A4_FREQUENCY = 440.0
A4_MIDI = 69

NOTE_NAMES_SHARPS: List[str] = [
    "C",
    "C#",
    "D",
    "D#",
    "E",
    "F",
    "F#",
    "G",
    "G#",
    "A",
    "A#",
    "B",
]
NOTE_NAMES_FLATS: List[str] = ["C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B"]


def midi_to_frequency(midi_number: int) -> float:
    """Frequency in Hz of a MIDI note number: 440 * 2^((n - 69) / 12)."""
    return A4_FREQUENCY * 2.0 ** ((midi_number - A4_MIDI) / 12.0)


def calculate_cents(detected_freq: float, target_freq: float) -> float:
    """Signed pitch difference in cents; positive when detected is sharp of target.

    Args:
        detected_freq: Measured frequency in Hz (must be positive)
        target_freq: Reference frequency in Hz (must be positive)

    Returns:
        1200 * log2(detected / target)
    """
    return float(1200.0 * np.log2(detected_freq / target_freq))


def get_note_name(freq: float, use_flats: bool = False) -> str:
    """Convert frequency to note name using Scientific Pitch Notation (SPN).

    Args:
        freq: Frequency in Hz
        use_flats: If True, use flat notes (e.g., 'Bb') instead of sharps (e.g., 'A#')

    Returns:
        Note name with octave in SPN (e.g., 'A4', 'C#4', 'Bb3'), or '---' for
        non-positive input

    Note:
        - Middle C is C4 (261.63 Hz)
        - Octave numbers change between B and C (e.g., B3 -> C4)
    """
    if freq <= 0:
        return "---"

    # Calculate half steps from A4
    half_steps = round(12 * np.log2(freq / A4_FREQUENCY))
    midi_number = A4_MIDI + half_steps

    # SPN octave calculation (C4 is middle C)
    octave = (midi_number // 12) - 1
    note_idx = midi_number % 12

    if use_flats:
        note_name = NOTE_NAMES_FLATS[note_idx]
    else:
        note_name = NOTE_NAMES_SHARPS[note_idx]

    return f"{note_name}{octave}"
