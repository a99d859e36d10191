import threading
import time
import unittest

from guitar_tuner.core.errors import (
    AudioCaptureError,
    EstimatorUnavailableError,
    NoActiveSessionError,
    SessionActiveError,
    SessionStoppedError,
    UnknownTuningError,
)
from guitar_tuner.note_matcher import TIMEOUT_ADVICE
from guitar_tuner.session import TuningSession
from guitar_tuner.tunings import get_tuning_by_id

from helpers import FakeFactory, Player

STANDARD_FREQUENCIES = {
    s.string_number: s.note.frequency for s in get_tuning_by_id("standard").strings
}


def make_session(factory=None):
    return TuningSession(
        factory=factory or FakeFactory(),
        stable_duration=0.1,
        poll_interval=0.01,
        timeout=1.0,
    )


class TestSessionLifecycle(unittest.TestCase):
    def setUp(self):
        self.factory = FakeFactory()
        self.session = make_session(self.factory)

    def tearDown(self):
        if self.session.is_active:
            self.session.stop()

    def test_idle_by_default(self):
        self.assertFalse(self.session.is_active)
        self.assertIsNone(self.session.current_tuning)
        self.assertIsNone(self.session.progress())

    def test_start(self):
        tuning = self.session.start("drop-d")
        self.assertEqual(tuning.id, "drop-d")
        self.assertTrue(self.session.is_active)
        self.assertEqual(self.session.current_tuning.name, "Drop D")
        self.assertTrue(self.factory.audio_input.is_running())
        self.assertTrue(self.factory.estimators[-1].initialized)
        self.assertEqual(self.session.progress().tuned_count, 0)

    def test_start_defaults_to_standard(self):
        self.assertEqual(self.session.start().id, "standard")

    def test_start_while_active(self):
        self.session.start("standard")
        with self.assertRaises(SessionActiveError) as ctx:
            self.session.start("drop-d")
        self.assertEqual(ctx.exception.tuning_name, "Standard")
        self.assertEqual(self.session.current_tuning.id, "standard")
        self.assertEqual(len(self.factory.inputs), 1)

    def test_start_unknown_tuning(self):
        with self.assertRaises(UnknownTuningError) as ctx:
            self.session.start("bogus")
        self.assertIn("dadgad", ctx.exception.available)
        self.assertFalse(self.session.is_active)
        self.assertEqual(self.factory.inputs, [])

    def test_failed_audio_start_releases_resources(self):
        self.factory.input_error = AudioCaptureError("device busy")
        with self.assertRaises(AudioCaptureError):
            self.session.start("standard")
        self.assertFalse(self.session.is_active)
        self.assertEqual(self.factory.audio_input.stop_count, 1)
        self.assertEqual(self.factory.estimators[-1].reset_count, 1)

    def test_failed_estimator_releases_audio(self):
        self.factory.estimator_error = EstimatorUnavailableError("aubio missing")
        with self.assertRaises(EstimatorUnavailableError):
            self.session.start("standard")
        self.assertFalse(self.session.is_active)
        self.assertEqual(self.factory.audio_input.stop_count, 1)

    def test_stop(self):
        self.session.start("open-g")
        audio_input = self.factory.audio_input
        tuning = self.session.stop()
        self.assertEqual(tuning.id, "open-g")
        self.assertFalse(self.session.is_active)
        self.assertFalse(audio_input.is_running())
        self.assertEqual(audio_input.stop_count, 1)

    def test_stop_when_idle(self):
        with self.assertRaises(NoActiveSessionError):
            self.session.stop()

    def test_restart_after_stop(self):
        self.session.start("standard")
        self.session.stop()
        self.session.start("dadgad")
        self.assertEqual(self.session.current_tuning.id, "dadgad")
        self.assertEqual(len(self.factory.inputs), 2)

    def test_audio_error_keeps_session(self):
        self.session.start("standard")
        self.factory.audio_input.report_error(AudioCaptureError("input overflow"))
        self.assertTrue(self.session.is_active)

    def test_readings_update_last_result(self):
        self.session.start("standard")
        self.factory.audio_input.push_frequency(108.0)
        result = self.session.last_result
        self.assertEqual(result.closest_string, 5)
        self.assertEqual(result.cents_deviation, -31.8)


class TestWaitForPitch(unittest.TestCase):
    def setUp(self):
        self.factory = FakeFactory()
        self.session = make_session(self.factory)
        self.session.start("standard")

    def tearDown(self):
        if self.session.is_active:
            self.session.stop()

    def play(self, frequencies, **kwargs):
        return Player(self.factory.audio_input, frequencies, **kwargs)

    def test_requires_session(self):
        self.session.stop()
        with self.assertRaises(NoActiveSessionError):
            self.session.wait_for_pitch(0.1)

    def test_stable_in_tune_reading(self):
        with self.play([110.0] * 60):
            result = self.session.wait_for_pitch(2.0)
        self.assertEqual(result.closest_string, 5)
        self.assertTrue(result.in_tune)
        self.assertEqual(result.progress.tuned_strings, [5])
        self.assertEqual(result.progress.tuned_count, 1)
        self.assertFalse(result.progress.all_in_tune)

    def test_stable_out_of_tune_reading_is_not_counted(self):
        with self.play([84.0] * 60):
            result = self.session.wait_for_pitch(2.0)
        self.assertEqual(result.closest_string, 6)
        self.assertFalse(result.in_tune)
        self.assertEqual(result.tuning_status.value, "sharp")
        self.assertEqual(result.progress.tuned_count, 0)

    def test_timeout_without_readings(self):
        start = time.monotonic()
        result = self.session.wait_for_pitch(0.2)
        self.assertGreaterEqual(time.monotonic() - start, 0.2)
        self.assertEqual(result.advice, TIMEOUT_ADVICE)
        self.assertIsNone(result.frequency)
        self.assertFalse(result.in_tune)
        self.assertTrue(self.session.is_active)

    def test_readings_before_wait_do_not_count(self):
        audio_input = self.factory.audio_input
        for _ in range(5):
            audio_input.push_frequency(110.0)
        time.sleep(0.2)
        result = self.session.wait_for_pitch(0.3)
        self.assertEqual(result.advice, TIMEOUT_ADVICE)

    def test_alternating_strings_time_out(self):
        with self.play([110.0, 146.83] * 40, interval=0.01):
            result = self.session.wait_for_pitch(0.4)
        self.assertEqual(result.advice, TIMEOUT_ADVICE)

    def test_silence_times_out(self):
        with self.play([None] * 40):
            result = self.session.wait_for_pitch(0.3)
        self.assertEqual(result.advice, TIMEOUT_ADVICE)

    def test_unmatched_frequency_times_out(self):
        with self.play([135.0] * 40):
            result = self.session.wait_for_pitch(0.3)
        self.assertEqual(result.advice, TIMEOUT_ADVICE)

    def test_stop_while_waiting(self):
        errors = []

        def wait():
            try:
                self.session.wait_for_pitch(5.0)
            except SessionStoppedError as e:
                errors.append(e)

        waiter = threading.Thread(target=wait)
        waiter.start()
        time.sleep(0.1)
        started = time.monotonic()
        self.session.stop()
        waiter.join(timeout=2.0)

        self.assertFalse(waiter.is_alive())
        self.assertLess(time.monotonic() - started, 1.0)
        self.assertEqual(len(errors), 1)
        self.assertEqual(str(errors[0]), "Tuning session was stopped.")

    def test_progress_accumulates_to_all_in_tune(self):
        result = None
        for string_number in (6, 5, 4, 3, 2, 1):
            with self.play([STANDARD_FREQUENCIES[string_number]] * 60):
                result = self.session.wait_for_pitch(2.0)
            self.assertEqual(result.closest_string, string_number)

        self.assertTrue(result.progress.all_in_tune)
        self.assertEqual(result.progress.tuned_strings, [6, 5, 4, 3, 2, 1])
        self.assertEqual(result.progress.tuned_count, 6)

    def test_retuned_string_counted_once(self):
        for _ in range(2):
            with self.play([110.0] * 60):
                result = self.session.wait_for_pitch(2.0)
        self.assertEqual(result.progress.tuned_count, 1)

    def test_progress_resets_with_new_session(self):
        with self.play([110.0] * 60):
            self.session.wait_for_pitch(2.0)
        self.session.stop()
        self.session.start("standard")
        self.assertEqual(self.session.progress().tuned_count, 0)


class TestSessionDefaults(unittest.TestCase):
    def test_timing_from_factory_config(self):
        class ConfiguredFactory(FakeFactory):
            def session_config(self):
                return {"stable_duration_ms": 250, "poll_interval_ms": 20, "timeout_ms": 5000}

        session = TuningSession(factory=ConfiguredFactory())
        self.assertEqual(session.default_timeout, 5.0)

    def test_builtin_defaults(self):
        session = TuningSession(factory=FakeFactory())
        self.assertEqual(session.default_timeout, 30.0)


if __name__ == "__main__":
    unittest.main()
