"""Factory for creating guitar tuner components."""

from typing import Any, Callable, Dict, Optional

from ..logger import get_logger
from ..audio.audio_input import SoundDeviceInput, WavFileAudioInput
from ..audio.pitch_algorithms import AubioPitchAlgorithm, AutocorrelationPitchAlgorithm
from ..audio.pitch_estimator import PitchEstimator
from .config import ConfigManager
from .errors import ConfigurationError
from .interfaces import IAudioInput, IPitchAlgorithm

logger = get_logger(__name__)


def _autocorrelation(config: Dict[str, Any]) -> IPitchAlgorithm:
    return AutocorrelationPitchAlgorithm(leniency=config.get("leniency", 0.85))


def _aubio(method: str) -> Callable[[Dict[str, Any]], IPitchAlgorithm]:
    def create(config: Dict[str, Any]) -> IPitchAlgorithm:
        return AubioPitchAlgorithm(method=method, tolerance=config.get("tolerance", 0.8))

    return create


class ComponentFactory:
    """Factory for creating guitar tuner components from configuration."""

    def __init__(self, config_manager: Optional[ConfigManager] = None, **audio_overrides):
        """Initialize the component factory.

        Args:
            config_manager: Configuration manager, or None to create a default one
            **audio_overrides: Parameters forced onto every audio input created
                (e.g. implementation="wav", file_path=...)
        """
        self.config_manager = config_manager or ConfigManager()
        self._audio_overrides = {k: v for k, v in audio_overrides.items() if v is not None}

        # Register default component implementations
        self.audio_input_classes: Dict[str, Callable[..., IAudioInput]] = {
            "default": SoundDeviceInput,
            "wav": WavFileAudioInput,
        }

        self.pitch_algorithms: Dict[str, Callable[[Dict[str, Any]], IPitchAlgorithm]] = {
            "autocorrelation": _autocorrelation,
            "yin": _aubio("yin"),
            "yinfft": _aubio("yinfft"),
        }

    def session_config(self) -> Dict[str, Any]:
        return self.config_manager.get_config("session")

    def create_audio_input(self, implementation: Optional[str] = None, **kwargs) -> IAudioInput:
        """Create an audio input.

        Args:
            implementation: Name of the implementation to use
            **kwargs: Additional parameters to pass to the constructor

        Returns:
            Audio input instance

        Raises:
            ConfigurationError: If the implementation is not registered or
                the configuration holds parameters it does not accept
        """
        params = dict(self._audio_overrides)
        params.update(kwargs)
        implementation = implementation or params.pop("implementation", "default")
        params.pop("implementation", None)

        if implementation not in self.audio_input_classes:
            raise ConfigurationError(f"Unknown audio input implementation: {implementation}")

        if implementation == "default":
            config = self.config_manager.get_config("audio_input")
            config.update(params)
        else:
            config = params

        cls = self.audio_input_classes[implementation]
        try:
            instance = cls(**config)
        except TypeError as e:
            raise ConfigurationError(
                f"Invalid {implementation} audio input configuration: {e}"
            ) from e

        logger.info(f"Created audio input: {implementation}")
        return instance

    def create_pitch_algorithm(self, name: Optional[str] = None) -> IPitchAlgorithm:
        """Create the configured pitch detection algorithm.

        Raises:
            ConfigurationError: If the algorithm is not registered
        """
        config = self.config_manager.get_config("pitch_estimator")
        name = name or config.get("algorithm", "autocorrelation")
        if name not in self.pitch_algorithms:
            raise ConfigurationError(
                f"Unknown pitch algorithm: {name}. Available: {', '.join(self.pitch_algorithms)}"
            )
        return self.pitch_algorithms[name](config)

    def create_pitch_estimator(self, sample_rate: Optional[int] = None, **kwargs) -> PitchEstimator:
        """Create a pitch estimator for an audio source's sample rate.

        Args:
            sample_rate: Sample rate of the audio source, or None for the configured rate
            **kwargs: Overrides for the estimator configuration

        Returns:
            Uninitialized PitchEstimator
        """
        config = self.config_manager.get_config("pitch_estimator")
        config.update(kwargs)
        if sample_rate is None:
            sample_rate = self.config_manager.get_config("audio_input").get("sample_rate", 44100)

        instance = PitchEstimator(
            algorithm=self.create_pitch_algorithm(config.get("algorithm")),
            sample_rate=sample_rate,
            window_size=config.get("window_size", PitchEstimator.DEFAULT_WINDOW_SIZE),
            rms_threshold=config.get("rms_threshold", PitchEstimator.DEFAULT_RMS_THRESHOLD),
            min_frequency=config.get("min_frequency", PitchEstimator.DEFAULT_MIN_FREQUENCY),
            max_frequency=config.get("max_frequency", PitchEstimator.DEFAULT_MAX_FREQUENCY),
        )
        logger.info(f"Created pitch estimator: {config.get('algorithm')}")
        return instance
