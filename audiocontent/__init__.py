"""Audio content analysis: instantaneous and block-wise features, chord probabilities and filters."""

__version__ = "0.3.1"