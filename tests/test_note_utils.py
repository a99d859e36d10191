import unittest

from guitar_tuner.note_utils import calculate_cents, get_note_name, midi_to_frequency


class TestScientificPitchNotation(unittest.TestCase):
    def test_a4(self):
        # A4 should be 440 Hz
        self.assertEqual(get_note_name(440.0), "A4")

    def test_octave_transitions(self):
        # Octave number changes between B and C
        self.assertEqual(get_note_name(246.94), "B3")
        self.assertEqual(get_note_name(261.63), "C4")

    def test_guitar_strings(self):
        self.assertEqual(get_note_name(82.41), "E2")
        self.assertEqual(get_note_name(110.0), "A2")
        self.assertEqual(get_note_name(329.63), "E4")

    def test_sharps_and_flats(self):
        self.assertEqual(get_note_name(77.78), "D#2")
        self.assertEqual(get_note_name(77.78, use_flats=True), "Eb2")
        self.assertEqual(get_note_name(185.0, use_flats=True), "Gb3")

    def test_non_positive_frequency(self):
        self.assertEqual(get_note_name(0.0), "---")
        self.assertEqual(get_note_name(-10.0), "---")


class TestMidiToFrequency(unittest.TestCase):
    def test_reference_pitch(self):
        self.assertAlmostEqual(midi_to_frequency(69), 440.0)

    def test_guitar_strings(self):
        self.assertAlmostEqual(midi_to_frequency(40), 82.41, places=2)
        self.assertAlmostEqual(midi_to_frequency(45), 110.0, places=2)
        self.assertAlmostEqual(midi_to_frequency(38), 73.42, places=2)
        self.assertAlmostEqual(midi_to_frequency(64), 329.63, places=2)

    def test_octave_doubles(self):
        self.assertAlmostEqual(midi_to_frequency(52), 2 * midi_to_frequency(40))


class TestCalculateCents(unittest.TestCase):
    def test_unison_is_zero(self):
        self.assertAlmostEqual(calculate_cents(110.0, 110.0), 0.0)

    def test_octave_is_1200(self):
        self.assertAlmostEqual(calculate_cents(220.0, 110.0), 1200.0)
        self.assertAlmostEqual(calculate_cents(55.0, 110.0), -1200.0)

    def test_sign(self):
        self.assertGreater(calculate_cents(111.0, 110.0), 0)
        self.assertLess(calculate_cents(109.0, 110.0), 0)

    def test_semitone(self):
        self.assertAlmostEqual(calculate_cents(midi_to_frequency(41), midi_to_frequency(40)), 100.0)


if __name__ == "__main__":
    unittest.main()
