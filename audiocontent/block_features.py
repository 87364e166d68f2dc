"""Feature extractors that process one block of data at a time.

A block is either a magnitude spectrum (spectral features) or a block of
audio samples (time-domain features).  Some extractors keep state between
blocks, such as the previous spectrum or the envelope of a smoothing filter.
"""

from __future__ import annotations

import math
from typing import Callable, Dict, Sequence, Union

import numpy as np

from . import instant_features as inst
from .feature_types import Feature

ArrayLike = Union[Sequence[float], np.ndarray]

_f32 = np.float32

_DISPATCH: Dict[Feature, Callable[[np.ndarray, float], float]] = {
    Feature.SPECTRAL_CENTROID: inst.spectral_centroid,
    Feature.SPECTRAL_CREST_FACTOR: inst.spectral_crest_factor,
    Feature.SPECTRAL_DECREASE: inst.spectral_decrease,
    Feature.SPECTRAL_FLATNESS: inst.spectral_flatness,
    Feature.SPECTRAL_KURTOSIS: inst.spectral_kurtosis,
    Feature.SPECTRAL_ROLLOFF: inst.spectral_rolloff,
    Feature.SPECTRAL_SKEWNESS: inst.spectral_skewness,
    Feature.SPECTRAL_SLOPE: inst.spectral_slope,
    Feature.SPECTRAL_SPREAD: inst.spectral_spread,
    Feature.SPECTRAL_TONAL_POWER_RATIO: inst.spectral_tonal_power_ratio,
    Feature.TIME_ACF_COEFF: inst.time_acf_coeff,
    Feature.TIME_PEAK_ENVELOPE: inst.time_peak_envelope,
    Feature.TIME_RMS: inst.time_rms,
    Feature.TIME_STD: inst.time_std,
    Feature.TIME_ZERO_CROSSING_RATE: inst.time_zero_crossing_rate,
}


def single_pole_coefficient(integration_time: float, sample_rate: float) -> float:
    """Return the feedback coefficient of a single-pole lowpass with the given integration time."""
    if integration_time <= 0 or sample_rate <= 0:
        raise ValueError("integration time and sample rate must be positive")
    return math.exp(-2.2 / (sample_rate * integration_time))


def _round_to_int(value: float) -> int:
    """Round half away from zero."""
    return int(value + 0.5) if value >= 0 else int(value - 0.5)


def _freq_to_bin(freq: float, fft_length: int, sample_rate: float) -> float:
    return float(_f32(freq) / _f32(sample_rate) * _f32(fft_length))


def _bin_to_freq(index: int, fft_length: int, sample_rate: float) -> float:
    return float(_f32(index) * _f32(sample_rate) / _f32(fft_length))


class BlockFeature:
    """Extractor of one feature from successive blocks of equal length.

    The plain class handles all features that need no memory and no
    special setup; the subclasses cover the others.
    """

    def __init__(self, feature: Feature | int, data_length: int, sample_rate: float = 1.0):
        feature = Feature(feature)
        if data_length <= 0:
            raise ValueError("data length must be positive")
        if sample_rate <= 0:
            raise ValueError("sample rate must be positive")
        if type(self) is BlockFeature and feature not in _DISPATCH:
            raise ValueError(f"feature {feature.name} needs a dedicated extractor")
        self.feature = feature
        self.data_length = int(data_length)
        self.sample_rate = float(sample_rate)

    def dimension(self) -> int:
        """Number of values produced per block."""
        return 1

    def compute(self, block: ArrayLike) -> np.ndarray:
        """Compute the feature for one block; returns an array of length ``dimension()``."""
        data = self._check(block)
        return np.array([_DISPATCH[self.feature](data, self.sample_rate)])

    def has_additional_param(self) -> bool:
        """True if the extractor accepts an additional parameter."""
        return False

    def set_additional_param(self, value: float) -> None:
        """Set the feature's additional parameter."""
        raise RuntimeError(f"feature {self.feature.name} has no additional parameter")

    def _check(self, block: ArrayLike) -> np.ndarray:
        data = np.asarray(block, dtype=np.float64)
        if data.shape != (self.data_length,):
            raise ValueError(f"block must be one-dimensional of length {self.data_length}")
        return data


class SpectralFluxFeature(BlockFeature):
    """Spectral flux against the spectrum of the previous block."""

    def __init__(self, data_length: int, sample_rate: float = 1.0):
        super().__init__(Feature.SPECTRAL_FLUX, data_length, sample_rate)
        self._prev = np.zeros(self.data_length)

    def compute(self, block: ArrayLike) -> np.ndarray:
        spec = self._check(block)
        value = inst.spectral_flux(spec, self._prev, self.sample_rate)
        self._prev = spec.copy()
        return np.array([value])


class MfccFeature(BlockFeature):
    """Mel frequency cepstral coefficients; the parameter is the number of coefficients."""

    NUM_BANDS = 40
    _NUM_LIN_FILTERS = 13

    def __init__(self, data_length: int, sample_rate: float = 1.0):
        super().__init__(Feature.SPECTRAL_MFCCS, data_length, sample_rate)
        if self.data_length < 2:
            raise ValueError("data length must be at least 2")
        self._filters = self._mel_filters().astype(np.float64)
        self._dct = self._dct_matrix(13)

    def dimension(self) -> int:
        return self._dct.shape[0]

    def compute(self, block: ArrayLike) -> np.ndarray:
        spec = self._check(block)
        mel = np.log10(self._filters @ spec + 1e-20)
        return self._dct @ mel

    def has_additional_param(self) -> bool:
        return True

    def set_additional_param(self, value: float) -> None:
        if value <= 0:
            raise ValueError("number of coefficients must be positive")
        num = _round_to_int(value)
        if num < 1:
            raise ValueError("number of coefficients must be at least 1")
        self._dct = self._dct_matrix(num)

    def _mel_filters(self) -> np.ndarray:
        n = self.data_length
        fft_length = (n - 1) * 2
        fs = self.sample_rate
        start = 400.0 / 3.0
        lin_spacing = 200.0 / 3.0
        log_spacing = 1.0711703

        bounds = [start, start + lin_spacing, start + 2.0 * lin_spacing]
        idx = [int(_freq_to_bin(b, fft_length, fs)) for b in bounds]
        filters = np.zeros((self.NUM_BANDS, n), dtype=np.float32)

        for c in range(self.NUM_BANDS):
            amp = 2.0 / (bounds[2] - bounds[0])
            for k in range(idx[0], min(idx[1], n - 1) + 1):
                freq = _bin_to_freq(k, fft_length, fs)
                if freq - bounds[0] <= 0.0:
                    continue
                filters[c, k] = amp * (freq - bounds[0]) / (bounds[1] - bounds[0])
            for k in range(idx[1] + 1, min(idx[2], n - 1) + 1):
                freq = _bin_to_freq(k, fft_length, fs)
                filters[c, k] = amp * (bounds[2] - freq) / (bounds[2] - bounds[1])

            upper = (
                bounds[2] + lin_spacing
                if c < self._NUM_LIN_FILTERS - 3
                else bounds[2] * log_spacing
            )
            bounds = [bounds[1], bounds[2], upper]
            idx = [idx[1], idx[2], int(_freq_to_bin(upper, fft_length, fs))]
        return filters

    def _dct_matrix(self, num_coeffs: int) -> np.ndarray:
        bands = self.NUM_BANDS
        b = np.arange(bands)
        c = np.arange(num_coeffs)[:, None]
        dct = np.cos(c * (2.0 * b + 1) * np.pi / 2.0 / bands).astype(np.float32)
        dct *= _f32(1.0) / np.sqrt(_f32(bands / 2.0))
        dct[0] *= _f32(1.0) / np.sqrt(_f32(2.0))
        return dct.astype(np.float64)


class PitchChromaFeature(BlockFeature):
    """Pitch chroma over twelve pitch classes; the parameter is the number of octaves."""

    NUM_PITCH_CLASSES = 12
    _A4 = 440.0
    _START_PITCH = 60

    def __init__(self, data_length: int, sample_rate: float = 1.0):
        super().__init__(Feature.SPECTRAL_PITCH_CHROMA, data_length, sample_rate)
        if self.data_length < 2:
            raise ValueError("data length must be at least 2")
        self._octaves = 4
        self._filters = self._pitch_filters()

    def dimension(self) -> int:
        return self.NUM_PITCH_CLASSES

    def compute(self, block: ArrayLike) -> np.ndarray:
        spec = self._check(block)
        chroma = self._filters @ (spec * spec)
        total = chroma.sum()
        if total > 0:
            chroma = chroma / total
        return chroma

    def has_additional_param(self) -> bool:
        return True

    def set_additional_param(self, value: float) -> None:
        if value <= 0:
            raise ValueError("number of octaves must be positive")
        self._octaves = _round_to_int(value)
        self._filters = self._pitch_filters()

    def _pitch_filters(self) -> np.ndarray:
        n = self.data_length
        fft_length = (n - 1) * 2
        fs = self.sample_rate
        filters = np.zeros((self.NUM_PITCH_CLASSES, n), dtype=np.float32)

        mid = _f32(self._A4 * 2.0 ** ((self._START_PITCH - 69) / 12.0))
        while float(mid) * 2.0**self._octaves > fs / 2:
            self._octaves -= 1
        if self._octaves <= 0:
            return filters.astype(np.float64)

        ratio = _f32(1.02930223664349)
        for p in range(self.NUM_PITCH_CLASSES):
            low = _f32(mid / ratio)
            high = _f32(mid * ratio)
            for _ in range(self._octaves):
                start = int(_freq_to_bin(low, fft_length, fs)) + 1
                stop = int(_freq_to_bin(high, fft_length, fs))
                count = stop - start + 1
                if count > 0:
                    filters[p, start : min(stop, n - 1) + 1] = _f32(1.0) / _f32(count)
                low = _f32(low * 2)
                high = _f32(high * 2)
            mid = _f32(mid * ratio * ratio)
        return filters.astype(np.float64)


class RolloffFeature(BlockFeature):
    """Spectral rolloff; the parameter is the bandwidth ratio kappa in (0, 1]."""

    def __init__(self, data_length: int, sample_rate: float = 1.0):
        super().__init__(Feature.SPECTRAL_ROLLOFF, data_length, sample_rate)
        self._kappa = 0.85

    def compute(self, block: ArrayLike) -> np.ndarray:
        spec = self._check(block)
        return np.array([inst.spectral_rolloff(spec, self.sample_rate, self._kappa)])

    def has_additional_param(self) -> bool:
        return True

    def set_additional_param(self, value: float) -> None:
        # values outside (0, 1] are ignored
        if 0 < value <= 1:
            self._kappa = float(value)


class TonalPowerRatioFeature(BlockFeature):
    """Tonal power ratio; the parameter is the peak threshold."""

    def __init__(self, data_length: int, sample_rate: float = 1.0):
        super().__init__(Feature.SPECTRAL_TONAL_POWER_RATIO, data_length, sample_rate)
        self._thresh = 5e-4

    def compute(self, block: ArrayLike) -> np.ndarray:
        spec = self._check(block)
        return np.array(
            [inst.spectral_tonal_power_ratio(spec, self.sample_rate, self._thresh)]
        )

    def has_additional_param(self) -> bool:
        return True

    def set_additional_param(self, value: float) -> None:
        if value > 0:
            self._thresh = float(value)


class AcfCoeffFeature(BlockFeature):
    """One autocorrelation coefficient; the parameter is the lag."""

    def __init__(self, data_length: int, sample_rate: float = 1.0):
        super().__init__(Feature.TIME_ACF_COEFF, data_length, sample_rate)
        self._eta = 19

    def compute(self, block: ArrayLike) -> np.ndarray:
        samples = self._check(block)
        return np.array([inst.time_acf_coeff(samples, self.sample_rate, self._eta)])

    def has_additional_param(self) -> bool:
        return True

    def set_additional_param(self, value: float) -> None:
        if value > 0:
            self._eta = _round_to_int(value)


class MaxAcfFeature(BlockFeature):
    """Maximum of the normalised autocorrelation after its main lobe.

    The parameter is the highest frequency of interest in Hz, which sets
    the smallest lag searched.
    """

    _MIN_THRESH = 0.35

    def __init__(self, data_length: int, sample_rate: float = 1.0):
        super().__init__(Feature.TIME_MAX_ACF, data_length, sample_rate)
        self._max_freq = 2000.0

    def compute(self, block: ArrayLike) -> np.ndarray:
        samples = self._check(block)
        n = self.data_length
        acf = np.correlate(samples, samples, mode="full")[n - 1 :]
        norm = float(np.dot(samples, samples))
        if norm > 0:
            acf = acf / norm

        eta_min = int(self.sample_rate / self._max_freq)

        # avoid the main lobe
        below = np.flatnonzero(acf <= self._MIN_THRESH)
        main_lobe = int(below[0]) if below.size else n
        eta_min = max(eta_min, main_lobe)

        # only look after the first minimum
        rising = np.flatnonzero(acf[:-1] <= acf[1:])
        first_min = int(rising[0]) if rising.size else n - 1
        if first_min >= n - 1:
            eta_min = 0
        else:
            eta_min = max(eta_min, first_min)
        eta_min = min(eta_min, n - 1)

        return np.array([float(np.max(np.abs(acf[eta_min:])))])

    def has_additional_param(self) -> bool:
        return True

    def set_additional_param(self, value: float) -> None:
        if 0 < value <= self.sample_rate / 2:
            self._max_freq = float(value)


class PeakEnvelopeFeature(BlockFeature):
    """Block maximum and the maximum of a peak-programme-meter envelope."""

    _ATTACK_TIME = 0.01
    _RELEASE_TIME = 1.5

    def __init__(self, data_length: int, sample_rate: float = 1.0):
        super().__init__(Feature.TIME_PEAK_ENVELOPE, data_length, sample_rate)
        self._attack = single_pole_coefficient(self._ATTACK_TIME, self.sample_rate)
        self._release = single_pole_coefficient(self._RELEASE_TIME, self.sample_rate)
        self._state = 0.0

    def dimension(self) -> int:
        return 2

    def compute(self, block: ArrayLike) -> np.ndarray:
        samples = self._check(block)
        attack, release = self._attack, self._release
        state = self._state
        peak = 0.0
        for value in np.abs(samples).tolist():
            if state > value:
                state = release * state
            else:
                state = (1.0 - attack) * value + attack * state
            if state > peak:
                peak = state
        self._state = state
        return np.array([inst.time_peak_envelope(samples, self.sample_rate), peak])


class RmsFeature(BlockFeature):
    """Block RMS and the maximum of a lowpass-smoothed RMS.

    The parameter is the integration time of the smoothing filter in seconds.
    """

    def __init__(self, data_length: int, sample_rate: float = 1.0):
        super().__init__(Feature.TIME_RMS, data_length, sample_rate)
        self._integration_time = 0.3
        self._alpha = single_pole_coefficient(self._integration_time, self.sample_rate)
        self._state = 0.0

    def dimension(self) -> int:
        return 2

    def compute(self, block: ArrayLike) -> np.ndarray:
        samples = self._check(block)
        alpha = self._alpha
        state = self._state
        peak = 0.0
        for value in (samples * samples).tolist():
            state = (1.0 - alpha) * value + alpha * state
            if state > peak:
                peak = state
        self._state = state
        return np.array([inst.time_rms(samples, self.sample_rate), math.sqrt(peak)])

    def has_additional_param(self) -> bool:
        return True

    def set_additional_param(self, value: float) -> None:
        if value > 0:
            self._integration_time = float(value)
            self._alpha = single_pole_coefficient(value, self.sample_rate)


_EXTRACTORS = {
    Feature.SPECTRAL_FLUX: SpectralFluxFeature,
    Feature.SPECTRAL_MFCCS: MfccFeature,
    Feature.SPECTRAL_PITCH_CHROMA: PitchChromaFeature,
    Feature.SPECTRAL_ROLLOFF: RolloffFeature,
    Feature.SPECTRAL_TONAL_POWER_RATIO: TonalPowerRatioFeature,
    Feature.TIME_ACF_COEFF: AcfCoeffFeature,
    Feature.TIME_MAX_ACF: MaxAcfFeature,
    Feature.TIME_PEAK_ENVELOPE: PeakEnvelopeFeature,
    Feature.TIME_RMS: RmsFeature,
}


def create_block_feature(
    feature: Feature | int, data_length: int, sample_rate: float = 1.0
) -> BlockFeature:
    """Create the extractor for ``feature`` working on blocks of ``data_length``."""
    feature = Feature(feature)
    extractor = _EXTRACTORS.get(feature)
    if extractor is None:
        return BlockFeature(feature, data_length, sample_rate)
    return extractor(data_length, sample_rate)