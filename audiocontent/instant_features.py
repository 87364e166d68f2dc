"""Instantaneous features computed from one block of samples or one magnitude spectrum.

Spectral features expect a magnitude spectrum of length ``fft_length / 2 + 1``;
time-domain features expect one block of audio samples.  Results given in Hz
use the sample rate passed in.
"""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np

ArrayLike = Union[Sequence[float], np.ndarray]

_FLOAT_THRESH = 1e-30


def _as_block(data: ArrayLike, what: str = "input") -> np.ndarray:
    """Return ``data`` as a non-empty one-dimensional float array."""
    block = np.asarray(data, dtype=np.float64)
    if block.ndim != 1:
        raise ValueError(f"{what} must be one-dimensional")
    if block.size == 0:
        raise ValueError(f"{what} must not be empty")
    return block


def _check_sample_rate(sample_rate: float) -> None:
    if sample_rate <= 0:
        raise ValueError("sample rate must be positive")


def _centroid_index(spec: np.ndarray) -> float:
    """Spectral centroid in bins, or 0 for an all-zero spectrum."""
    norm = spec.sum()
    if norm < _FLOAT_THRESH:
        return 0.0
    return float(np.dot(np.arange(spec.size), spec) / norm)


def _spread_index(spec: np.ndarray) -> float:
    """Spectral spread in bins, or 0 when the centroid is zero."""
    centroid = _centroid_index(spec)
    if centroid < _FLOAT_THRESH:
        return 0.0
    deviation = np.arange(spec.size) - centroid
    return float(np.sqrt(np.dot(deviation * deviation, spec) / spec.sum()))


def _bin_to_hz(index: float, length: int, sample_rate: float) -> float:
    return index * sample_rate / (2.0 * (length - 1))


def spectral_centroid(mag_spec: ArrayLike, sample_rate: float = 1.0) -> float:
    """Centre of gravity of the magnitude spectrum in Hz."""
    spec = _as_block(mag_spec, "magnitude spectrum")
    _check_sample_rate(sample_rate)
    return _bin_to_hz(_centroid_index(spec), spec.size, sample_rate)


def spectral_crest_factor(mag_spec: ArrayLike, sample_rate: float = 1.0) -> float:
    """Ratio of the spectral maximum to the spectral sum."""
    spec = _as_block(mag_spec, "magnitude spectrum")
    norm = spec.sum()
    if norm < _FLOAT_THRESH:
        return 0.0
    return float(spec.max() / norm)


def spectral_decrease(mag_spec: ArrayLike, sample_rate: float = 1.0) -> float:
    """Average slope of the spectrum relative to its first bin."""
    spec = _as_block(mag_spec, "magnitude spectrum")
    rest = spec[1:]
    norm = rest.sum()
    if norm < _FLOAT_THRESH:
        return 0.0
    decrease = np.sum((rest - spec[0]) / np.arange(1, spec.size))
    return float(decrease / norm)


def spectral_flatness(mag_spec: ArrayLike, sample_rate: float = 1.0) -> float:
    """Ratio of the geometric mean to the arithmetic mean of the spectrum."""
    spec = _as_block(mag_spec, "magnitude spectrum")
    mean = spec.mean()
    if mean < _FLOAT_THRESH or spec.min() < _FLOAT_THRESH:
        return 0.0
    return float(np.exp(np.mean(np.log(spec))) / mean)


def spectral_flux(
    mag_spec: ArrayLike, prev_spec: ArrayLike, sample_rate: float = 1.0
) -> float:
    """Euclidean distance between two neighbouring spectra, normalised by length."""
    spec = _as_block(mag_spec, "magnitude spectrum")
    prev = _as_block(prev_spec, "previous spectrum")
    if spec.size != prev.size:
        raise ValueError("spectra must have the same length")
    diff = spec - prev
    return float(np.sqrt(np.dot(diff, diff)) / spec.size)


def spectral_kurtosis(mag_spec: ArrayLike, sample_rate: float = 1.0) -> float:
    """Excess kurtosis of the spectral distribution."""
    spec = _as_block(mag_spec, "magnitude spectrum")
    _check_sample_rate(sample_rate)
    centroid = _centroid_index(spec)
    spread = _spread_index(spec)
    if centroid < _FLOAT_THRESH or spread < _FLOAT_THRESH:
        return 0.0
    norm = spec.sum()
    if norm < _FLOAT_THRESH:
        return 0.0
    deviation = (np.arange(spec.size) - centroid) ** 4
    return float(np.dot(deviation, spec) / (spread**4 * norm) - 3.0)


def spectral_rolloff(
    mag_spec: ArrayLike, sample_rate: float = 1.0, kappa: float = 0.85
) -> float:
    """Frequency in Hz below which ``kappa`` of the spectral sum is concentrated."""
    spec = _as_block(mag_spec, "magnitude spectrum")
    _check_sample_rate(sample_rate)
    if not 0.0 < kappa <= 1.0:
        raise ValueError("kappa must lie in (0, 1]")
    norm = spec.sum()
    if norm < _FLOAT_THRESH:
        return 0.0
    cumulative = np.cumsum(spec)
    index = int(np.searchsorted(cumulative, kappa * norm, side="right"))
    index = min(index, spec.size - 1)
    return _bin_to_hz(index, spec.size, sample_rate)


def spectral_skewness(mag_spec: ArrayLike, sample_rate: float = 1.0) -> float:
    """Skewness of the spectral distribution."""
    spec = _as_block(mag_spec, "magnitude spectrum")
    _check_sample_rate(sample_rate)
    centroid = _centroid_index(spec)
    spread = _spread_index(spec)
    if centroid < _FLOAT_THRESH or spread < _FLOAT_THRESH:
        return 0.0
    norm = spec.sum()
    if norm < _FLOAT_THRESH:
        return 0.0
    deviation = (np.arange(spec.size) - centroid) ** 3
    return float(np.dot(deviation, spec) / (spread**3 * norm))


def spectral_slope(mag_spec: ArrayLike, sample_rate: float = 1.0) -> float:
    """Slope of a linear fit to the spectrum."""
    spec = _as_block(mag_spec, "magnitude spectrum")
    _check_sample_rate(sample_rate)
    centroid = _centroid_index(spec)
    if centroid < _FLOAT_THRESH:
        return 0.0
    offsets = np.arange(spec.size) - (spec.size + 1) / 2.0
    norm = np.dot(offsets, offsets)
    if norm < _FLOAT_THRESH:
        return 0.0
    return float(np.dot(offsets, spec - centroid) / norm)


def spectral_spread(mag_spec: ArrayLike, sample_rate: float = 1.0) -> float:
    """Standard deviation of the spectrum around its centroid, in Hz."""
    spec = _as_block(mag_spec, "magnitude spectrum")
    _check_sample_rate(sample_rate)
    return _bin_to_hz(_spread_index(spec), spec.size, sample_rate)


def spectral_tonal_power_ratio(
    mag_spec: ArrayLike, sample_rate: float = 1.0, thresh: float = 5e-4
) -> float:
    """Ratio of the power in local spectral maxima above ``thresh`` to the total power."""
    spec = _as_block(mag_spec, "magnitude spectrum")
    power = spec * spec
    norm = power[0] + power[-1]
    inner = spec[1:-1]
    norm += np.sum(power[1:-1])
    peaks = (inner > spec[:-2]) & (inner > spec[2:]) & (inner > thresh)
    tonal = np.sum(power[1:-1][peaks])
    # a peak in the second-to-last bin adds the last bin to the norm once more
    if peaks.size and peaks[-1]:
        norm += power[-1]
    if norm < _FLOAT_THRESH:
        return 0.0
    return float(tonal / norm)


def time_acf_coeff(samples: ArrayLike, sample_rate: float = 1.0, eta: int = 19) -> float:
    """Autocorrelation coefficient at lag ``eta``."""
    block = _as_block(samples, "samples")
    if eta < 0 or eta >= block.size:
        raise ValueError("lag must be non-negative and shorter than the block")
    return float(np.dot(block[: block.size - eta], block[eta:]))


def time_peak_envelope(samples: ArrayLike, sample_rate: float = 1.0) -> float:
    """Maximum sample value of the block."""
    return float(_as_block(samples, "samples").max())


def time_rms(samples: ArrayLike, sample_rate: float = 1.0) -> float:
    """Root mean square of the block."""
    block = _as_block(samples, "samples")
    return float(np.sqrt(np.mean(block * block)))


def time_std(samples: ArrayLike, sample_rate: float = 1.0) -> float:
    """Standard deviation of the block."""
    return float(np.std(_as_block(samples, "samples")))


def time_zero_crossing_rate(samples: ArrayLike, sample_rate: float = 1.0) -> float:
    """Rate of sign changes per sample, starting from a zero sign."""
    block = _as_block(samples, "samples")
    signs = np.concatenate(([0.0], np.sign(block)))
    return float(np.sum(np.abs(np.diff(signs))) / (2 * block.size))