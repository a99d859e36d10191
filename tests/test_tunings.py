import unittest

from guitar_tuner.note_types import GuitarString, Note, TuningPreset
from guitar_tuner.tunings import (
    DEFAULT_TUNING_ID,
    TUNING_PRESETS,
    get_tuning_by_id,
    get_tuning_ids,
    list_tunings,
)


class TestTuningCatalog(unittest.TestCase):
    def test_ids_in_order(self):
        self.assertEqual(
            get_tuning_ids(),
            ["standard", "drop-d", "half-step-down", "open-g", "open-d", "dadgad"],
        )

    def test_default_is_standard(self):
        self.assertEqual(DEFAULT_TUNING_ID, "standard")
        self.assertIsNotNone(get_tuning_by_id(DEFAULT_TUNING_ID))

    def test_unknown_id(self):
        self.assertIsNone(get_tuning_by_id("nashville"))
        self.assertIsNone(get_tuning_by_id(""))

    def test_list_tunings(self):
        self.assertEqual(len(list_tunings()), 6)
        self.assertEqual(list_tunings(), list(TUNING_PRESETS))

    def test_every_preset_has_six_distinct_strings(self):
        for preset in TUNING_PRESETS:
            numbers = [s.string_number for s in preset.strings]
            self.assertEqual(numbers, [6, 5, 4, 3, 2, 1], preset.id)

    def test_standard_notes(self):
        standard = get_tuning_by_id("standard")
        self.assertEqual(
            [(s.note.full_name, s.note.midi_number, s.note.frequency) for s in standard.strings],
            [
                ("E2", 40, 82.41),
                ("A2", 45, 110.0),
                ("D3", 50, 146.83),
                ("G3", 55, 196.0),
                ("B3", 59, 246.94),
                ("E4", 64, 329.63),
            ],
        )

    def test_drop_d_lowers_sixth_string(self):
        drop_d = get_tuning_by_id("drop-d")
        sixth = drop_d.get_string(6)
        self.assertEqual(sixth.note.full_name, "D2")
        self.assertEqual(sixth.note.midi_number, 38)
        self.assertEqual(sixth.note.frequency, 73.42)
        self.assertEqual(drop_d.get_string(1).note.full_name, "E4")

    def test_half_step_down_uses_flats(self):
        names = [s.note.full_name for s in get_tuning_by_id("half-step-down").strings]
        self.assertEqual(names, ["Eb2", "Ab2", "Db3", "Gb3", "Bb3", "Eb4"])

    def test_open_tunings(self):
        self.assertEqual(
            [s.note.midi_number for s in get_tuning_by_id("open-g").strings],
            [38, 43, 50, 55, 59, 62],
        )
        self.assertEqual(
            [s.note.midi_number for s in get_tuning_by_id("open-d").strings],
            [38, 45, 50, 54, 57, 62],
        )
        self.assertEqual(
            [s.note.midi_number for s in get_tuning_by_id("dadgad").strings],
            [38, 45, 50, 55, 57, 62],
        )

    def test_get_string_out_of_range(self):
        self.assertIsNone(get_tuning_by_id("standard").get_string(7))

    def test_to_dict(self):
        data = get_tuning_by_id("standard").to_dict()
        self.assertEqual(data["id"], "standard")
        self.assertEqual(data["name"], "Standard")
        self.assertEqual(data["description"], "Standard tuning (E A D G B E)")
        self.assertEqual(
            data["strings"][0], {"string_number": 6, "note": "E2", "frequency": 82.41}
        )


class TestTuningPresetValidation(unittest.TestCase):
    def test_rejects_missing_string(self):
        strings = tuple(
            GuitarString(n, Note.from_midi("E", 2, 40)) for n in (6, 5, 4, 3, 2)
        )
        with self.assertRaises(ValueError):
            TuningPreset(id="short", name="Short", description="", strings=strings)

    def test_rejects_duplicate_string(self):
        strings = tuple(
            GuitarString(n, Note.from_midi("E", 2, 40)) for n in (6, 5, 4, 3, 2, 2)
        )
        with self.assertRaises(ValueError):
            TuningPreset(id="dup", name="Dup", description="", strings=strings)


if __name__ == "__main__":
    unittest.main()
