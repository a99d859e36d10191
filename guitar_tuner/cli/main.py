"""Main entry point for the guitar tuner CLI."""

import argparse
import json
import sys
from typing import Any, Dict, List, Optional

from ..logger import get_logger
from ..logging_config import setup_logging
from ..core.config import ConfigManager
from ..core.errors import AudioCaptureError
from ..core.factory import ComponentFactory
from ..note_matcher import TIMEOUT_ADVICE
from ..services.tuner_service import TunerService
from ..session import TuningSession
from ..tunings import DEFAULT_TUNING_ID, get_tuning_ids, list_tunings

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Guitar Tuner - tune a 6-string guitar from the microphone")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level for guitar_tuner modules (e.g. INFO, WARNING).",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("tunings", help="List the available tunings")

    devices_parser = subparsers.add_parser("devices", help="List audio input devices")
    devices_parser.add_argument(
        "--check-rates", action="store_true", help="Check supported sample rates"
    )

    tune_parser = subparsers.add_parser("tune", help="Tune interactively from the terminal")
    tune_parser.add_argument(
        "--tuning",
        default=DEFAULT_TUNING_ID,
        choices=get_tuning_ids(),
        help=f"Tuning to tune to (default: {DEFAULT_TUNING_ID})",
    )
    tune_parser.add_argument("--device", type=int, default=None, help="Audio input device ID")
    tune_parser.add_argument(
        "--wav", default=None, help="Read audio from a sound file instead of the microphone"
    )
    tune_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for each stable note (default: from config, 30)",
    )

    subparsers.add_parser("serve", help="Run the MCP server on stdio")

    config_parser = subparsers.add_parser("config", help="Show or change stored settings")
    config_sub = config_parser.add_subparsers(dest="config_command", help="Config action")
    show_parser = config_sub.add_parser("show", help="Print settings as JSON")
    show_parser.add_argument("section", nargs="?", default=None, help="Section to show")
    set_parser = config_sub.add_parser("set", help="Change one setting")
    set_parser.add_argument("section", help="Section name (e.g. pitch_estimator)")
    set_parser.add_argument("key", help="Setting name")
    set_parser.add_argument("value", help="New value, parsed as JSON when possible")
    reset_parser = config_sub.add_parser("reset", help="Restore a section to its defaults")
    reset_parser.add_argument("section", help="Section name")
    return parser


def print_tunings() -> int:
    for tuning in list_tunings():
        notes = " ".join(s.note.full_name for s in tuning.strings)
        print(f"{tuning.id:<16} {tuning.name:<28} {notes}")
        print(f"{'':<16} {tuning.description}")
    return 0


def print_devices(check_rates: bool = False) -> int:
    from ..audio.audio_device import default_input_device, list_input_devices

    try:
        devices = list_input_devices(check_rates=check_rates)
        default_id = default_input_device()
    except AudioCaptureError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not devices:
        print("No audio input devices found.")
        return 1

    print("Available audio input devices:")
    for device in devices:
        marker = "*" if device["id"] == default_id else " "
        print(
            f"{marker} {device['id']}: {device['name']} "
            f"({device['max_input_channels']} in, {device['default_samplerate']:.0f} Hz)"
        )
        if check_rates:
            rates = ", ".join(str(r) for r in device["supported_sample_rates"]) or "none"
            print(f"    supported rates: {rates}")
    return 0


def parse_config_value(raw: str) -> Any:
    """Read a command line value as JSON, falling back to the plain string."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def run_config(
    action: Optional[str],
    section: Optional[str] = None,
    key: Optional[str] = None,
    value: Optional[str] = None,
) -> int:
    """Show, change or reset the stored configuration.

    Returns:
        Exit code (1 for an unknown section or a failed save)
    """
    manager = ConfigManager()
    if section is not None and section not in manager.configs:
        print(f"Unknown config section: {section}", file=sys.stderr)
        print(f"  Available: {', '.join(manager.configs)}", file=sys.stderr)
        return 1

    if action == "set":
        if not manager.update_config(section, {key: parse_config_value(value)}):
            print(f"Failed to save {section} config", file=sys.stderr)
            return 1
        print(json.dumps(manager.get_config(section), indent=2))
        return 0

    if action == "reset":
        if not manager.reset_config(section):
            print(f"Failed to reset {section} config", file=sys.stderr)
            return 1
        print(f"Reset {section} to defaults")
        return 0

    if section is not None:
        print(json.dumps(manager.get_config(section), indent=2))
    else:
        print(json.dumps({name: manager.get_config(name) for name in manager.configs}, indent=2))
    return 0


def format_reading(reading: Dict[str, Any]) -> str:
    """One terminal line for a get_pitch() result."""
    if reading.get("closest_string") is None:
        return reading["advice"]

    marker = "OK" if reading["in_tune"] else ("^" if reading["tuning_status"] == "flat" else "v")
    line = (
        f"[{marker:>2}] {reading['frequency']:7.1f} Hz  "
        f"{reading['cents_deviation']:+6.1f} cents  {reading['advice']}"
    )
    if "tuned_count" in reading:
        line += f"  ({reading['tuned_count']}/{reading['total_strings']} tuned)"
    return line


def run_tuner(
    tuning_id: str = DEFAULT_TUNING_ID,
    device_id: Optional[int] = None,
    wav_file: Optional[str] = None,
    timeout: Optional[float] = None,
) -> int:
    """Run an interactive tuning session until every string is tuned.

    Args:
        tuning_id: Tuning to tune to
        device_id: Audio input device ID, or None for the default device
        wav_file: Sound file to read instead of the microphone
        timeout: Seconds to wait for each stable note

    Returns:
        Exit code (0 when all strings were tuned or the user stopped)
    """
    if wav_file:
        factory = ComponentFactory(implementation="wav", file_path=wav_file)
    else:
        factory = ComponentFactory(device_id=device_id)
    service = TunerService(TuningSession(factory))

    started = service.start_tuning(tuning_id)
    if not started["success"]:
        print(f"{started['message']}", file=sys.stderr)
        print(f"  {started['error']}", file=sys.stderr)
        return 1

    print(started["message"])
    for guitar_string in started["tuning"]["strings"]:
        print(
            f"  String {guitar_string['string_number']}: "
            f"{guitar_string['note']:<4} {guitar_string['frequency']:.2f} Hz"
        )
    print("\nPlay one string at a time and hold the note. Press Ctrl+C to stop.\n")

    try:
        while True:
            reading = service.get_pitch(timeout)
            if "error" in reading:
                print(reading["error"], file=sys.stderr)
                return 1

            print(format_reading(reading))
            if reading.get("all_in_tune"):
                print(reading["message"])
                return 0
            if wav_file and reading["advice"] == TIMEOUT_ADVICE:
                # A finished file produces no more readings
                logger.info("No stable note in the rest of the file")
                return 0
    except KeyboardInterrupt:
        print("\nStopped by user")
        return 0
    finally:
        service.shutdown()


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI.

    Args:
        args: Command line arguments, or None to use sys.argv

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = build_parser()
    parsed = parser.parse_args(args)

    level = "DEBUG" if parsed.debug else parsed.log_level

    if parsed.command == "serve":
        from ..server import main as serve_main

        serve_main(level)
        return 0

    setup_logging(level)

    if parsed.command == "tunings":
        return print_tunings()
    if parsed.command == "devices":
        return print_devices(parsed.check_rates)
    if parsed.command == "tune":
        return run_tuner(
            tuning_id=parsed.tuning,
            device_id=parsed.device,
            wav_file=parsed.wav,
            timeout=parsed.timeout,
        )
    if parsed.command == "config":
        return run_config(
            parsed.config_command,
            getattr(parsed, "section", None),
            getattr(parsed, "key", None),
            getattr(parsed, "value", None),
        )

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
