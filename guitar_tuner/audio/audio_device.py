"""Audio device utilities."""

from typing import Any, Dict, List, Optional

from ..logger import get_logger
from .audio_input import load_sounddevice

logger = get_logger(__name__)

COMMON_SAMPLE_RATES = [8000, 16000, 22050, 44100, 48000, 96000]


def list_input_devices(check_rates: bool = False) -> List[Dict[str, Any]]:
    """Describe every device with at least one input channel.

    Args:
        check_rates: Also check which common sample rates each device accepts

    Returns:
        One dict per input device with id, name, channels and default rate
    """
    sd = load_sounddevice()
    devices = []
    for device_id, device in enumerate(sd.query_devices()):
        if device["max_input_channels"] <= 0:
            continue
        entry: Dict[str, Any] = {
            "id": device_id,
            "name": device["name"],
            "max_input_channels": device["max_input_channels"],
            "default_samplerate": device["default_samplerate"],
        }
        if check_rates:
            supported = []
            for rate in COMMON_SAMPLE_RATES:
                try:
                    sd.check_input_settings(device=device_id, samplerate=rate, channels=1)
                    supported.append(rate)
                except Exception as e:
                    logger.debug(f"Device {device_id} rejects {rate} Hz: {e}")
            entry["supported_sample_rates"] = supported
        devices.append(entry)
    return devices


def default_input_device() -> Optional[int]:
    """ID of the system default input device, or None when there is none."""
    sd = load_sounddevice()
    device = sd.default.device[0]
    if device is None or device < 0:
        return None
    return int(device)
