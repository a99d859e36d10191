"""Services exposing the tuning session to transports."""

from .tuner_service import TunerService

__all__ = ["TunerService"]
