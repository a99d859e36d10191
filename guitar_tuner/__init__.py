"""Guitar tuner: pitch estimation, string matching and stability-gated tuning sessions."""

__version__ = "1.0.0"
