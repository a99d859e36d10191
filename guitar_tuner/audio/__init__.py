"""Audio sources and pitch estimation."""
