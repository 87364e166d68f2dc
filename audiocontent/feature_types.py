"""Identifiers for the instantaneous audio features and their names."""

from __future__ import annotations

from enum import IntEnum


class Feature(IntEnum):
    """All supported instantaneous features, spectral ones first."""

    SPECTRAL_CENTROID = 0
    SPECTRAL_CREST_FACTOR = 1
    SPECTRAL_DECREASE = 2
    SPECTRAL_FLATNESS = 3
    SPECTRAL_FLUX = 4
    SPECTRAL_KURTOSIS = 5
    SPECTRAL_MFCCS = 6
    SPECTRAL_PITCH_CHROMA = 7
    SPECTRAL_ROLLOFF = 8
    SPECTRAL_SKEWNESS = 9
    SPECTRAL_SLOPE = 10
    SPECTRAL_SPREAD = 11
    SPECTRAL_TONAL_POWER_RATIO = 12

    TIME_ACF_COEFF = 13
    TIME_MAX_ACF = 14
    TIME_PEAK_ENVELOPE = 15
    TIME_RMS = 16
    TIME_STD = 17
    TIME_ZERO_CROSSING_RATE = 18

    def is_spectral(self) -> bool:
        """True if the feature is computed from a magnitude spectrum."""
        return self <= Feature.SPECTRAL_TONAL_POWER_RATIO


_NAMES: dict[Feature, str] = {
    Feature.SPECTRAL_CENTROID: "SpectralCentroid",
    Feature.SPECTRAL_CREST_FACTOR: "SpectralCrestFactor",
    Feature.SPECTRAL_DECREASE: "SpectralDecrease",
    Feature.SPECTRAL_FLATNESS: "SpectralFlatness",
    Feature.SPECTRAL_FLUX: "SpectralFlux",
    Feature.SPECTRAL_KURTOSIS: "SpectralKurtosis",
    Feature.SPECTRAL_MFCCS: "SpectralMfccs",
    Feature.SPECTRAL_PITCH_CHROMA: "SpectralPitchChroma",
    Feature.SPECTRAL_ROLLOFF: "SpectralRolloff",
    Feature.SPECTRAL_SKEWNESS: "SpectralSkewness",
    Feature.SPECTRAL_SLOPE: "SpectralSlope",
    Feature.SPECTRAL_SPREAD: "SpectralSpread",
    Feature.SPECTRAL_TONAL_POWER_RATIO: "SpectralTonalPowerRatio",
    Feature.TIME_ACF_COEFF: "TimeAcfCoeff",
    Feature.TIME_MAX_ACF: "TimeMaxAcf",
    Feature.TIME_PEAK_ENVELOPE: "TimePeakEnvelope",
    Feature.TIME_RMS: "TimeRms",
    Feature.TIME_STD: "TimeStd",
    Feature.TIME_ZERO_CROSSING_RATE: "TimeZeroCrossingRate",
}

_BY_NAME: dict[str, Feature] = {name: feature for feature, name in _NAMES.items()}


def feature_name(feature: Feature | int) -> str:
    """Return the descriptive name of a feature.

    Raises ValueError for an index that names no feature.
    """
    return _NAMES[Feature(feature)]


def feature_from_name(name: str) -> Feature:
    """Return the feature described by ``name``.

    Raises ValueError if the name is unknown.
    """
    try:
        return _BY_NAME[name]
    except KeyError:
        raise ValueError(f"unknown feature name: {name!r}") from None