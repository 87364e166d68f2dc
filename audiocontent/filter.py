"""Generic IIR/FIR filtering and Butterworth lowpass design."""

from __future__ import annotations

import math
from collections import deque
from typing import Sequence, Tuple, Union

import numpy as np

ArrayLike = Union[Sequence[float], np.ndarray]


def _as_signal(samples: ArrayLike) -> np.ndarray:
    signal = np.asarray(samples, dtype=np.float64)
    if signal.ndim != 1:
        raise ValueError("signal must be one-dimensional")
    if signal.size == 0:
        raise ValueError("signal must not be empty")
    return signal


class Filter:
    """Filter with numerator ``b`` and denominator ``a`` (normalised so that ``a[0] == 1``).

    The filter keeps its state between calls, so a signal can be processed
    block by block.
    """

    def __init__(self, b: ArrayLike, a: ArrayLike):
        b_arr = np.asarray(b, dtype=np.float64).ravel()
        a_arr = np.asarray(a, dtype=np.float64).ravel()
        if b_arr.size == 0 or a_arr.size == 0:
            raise ValueError("filter coefficients must not be empty")
        if b_arr.size != a_arr.size:
            raise ValueError("numerator and denominator must have the same length")
        self.b = b_arr.copy()
        self.a = a_arr.copy()
        self._num_coeffs = int(b_arr.size)
        self._state = np.zeros(self._num_coeffs - 1)
        self._history: deque[float] = deque(
            [0.0] * (self._num_coeffs - 1), maxlen=self._num_coeffs - 1
        )

    def reset(self) -> None:
        """Clear the internal filter state."""
        self._state = np.zeros(self._num_coeffs - 1)
        self._history = deque(
            [0.0] * (self._num_coeffs - 1), maxlen=self._num_coeffs - 1
        )

    def process(self, samples: ArrayLike) -> np.ndarray:
        """Filter ``samples`` with a transposed direct form II structure."""
        signal = _as_signal(samples)
        b, a = self.b, self.a
        n = self._num_coeffs
        state = self._state
        out = np.empty_like(signal)
        for i, x in enumerate(signal.tolist()):
            y = (state[0] if n > 1 else 0.0) + b[0] * x
            if n > 2:
                state[:-1] = state[1:] - a[1:-1] * y + b[1:-1] * x
            if n > 1:
                state[-1] = -a[-1] * y + b[-1] * x
            out[i] = y
        return out

    def process_direct_form2(self, samples: ArrayLike) -> np.ndarray:
        """Filter ``samples`` with a direct form II structure."""
        signal = _as_signal(samples)
        b, a = self.b, self.a
        history = self._history
        out = np.empty_like(signal)
        for i, x in enumerate(signal.tolist()):
            # past[j - 1] holds the internal value j samples back
            past = np.array(history, dtype=np.float64)[::-1]
            w = x - float(np.dot(a[1:], past))
            out[i] = b[0] * w + float(np.dot(b[1:], past))
            history.append(w)
        return out

    def filtfilt(self, samples: ArrayLike) -> np.ndarray:
        """Zero-phase filtering of a complete signal (forward and backward pass).

        The signal is padded at both ends by odd reflection of
        ``3 * (len(b) - 1)`` samples; it must be longer than that.
        """
        signal = _as_signal(samples)
        num_samples = signal.size
        pad = 3 * (self._num_coeffs - 1)
        if pad >= num_samples:
            raise ValueError(
                f"signal must be longer than {pad} samples for zero-phase filtering"
            )

        self.reset()
        try:
            if pad:
                front = (2.0 * signal[0] - signal[1 : pad + 1])[::-1]
                self._set_initial_state(front[0])
                self.process(front)
            forward = self.process(signal)
            if pad:
                back = 2.0 * signal[-1] - signal[num_samples - 2 :: -1][:pad]
                tail = self.process(back)
                padded = np.concatenate((forward, tail))
            else:
                padded = forward

            self.reset()
            self._set_initial_state(padded[-1])
            backward = self.process(padded[::-1])
            return backward[pad:][::-1].copy()
        finally:
            self.reset()

    def _set_initial_state(self, weight: float) -> None:
        """Set the state to the steady-state response of a step with height ``weight``."""
        length = self._num_coeffs - 1
        if length == 0:
            return
        b, a = self.b, self.a
        rhs = b[1:] - b[0] * a[1:]
        matrix = np.eye(length)
        matrix[:, 0] += a[1:]
        for m in range(length - 1):
            matrix[m, m + 1] = -1.0
        zi = np.linalg.solve(matrix, rhs)
        self._state = weight * zi


def _butter_scale(order: int, cutoff: float) -> float:
    phase = math.pi / (2.0 * order)
    scale = 1.0
    for j in range(order // 2):
        scale *= 1.0 + math.sin(math.pi * cutoff) * math.sin((2 * j + 1) * phase)
    if order % 2:
        scale *= math.sin(math.pi * cutoff / 2) + math.cos(math.pi * cutoff / 2)
    return math.sin(math.pi * cutoff / 2) ** order / scale


def _butter_denominator(order: int, cutoff: float) -> np.ndarray:
    coeffs = np.zeros(2 * order)
    for j in range(order):
        arg = math.pi * (2.0 * j + 1) / (2.0 * order)
        norm = 1.0 + math.sin(math.pi * cutoff) * math.sin(arg)
        coeffs[2 * j] = -math.cos(math.pi * cutoff) / norm
        coeffs[2 * j + 1] = -math.sin(math.pi * cutoff) * math.cos(arg) / norm

    # multiply out the complex binomials (real, imaginary interleaved)
    out = np.zeros(2 * order)
    for i in range(order):
        re, im = coeffs[2 * i], coeffs[2 * i + 1]
        for j in range(i, 0, -1):
            out[2 * j] += re * out[2 * (j - 1)] - im * out[2 * (j - 1) + 1]
            out[2 * j + 1] += re * out[2 * (j - 1) + 1] + im * out[2 * (j - 1)]
        out[0] += re
        out[1] += im

    out[1] = out[0]
    out[0] = 1.0
    for j in range(3, order + 1):
        out[j] = out[2 * j - 2]
    return out[: order + 1].copy()


def butter_lowpass(order: int, cutoff: float) -> Tuple[np.ndarray, np.ndarray]:
    """Butterworth lowpass coefficients ``(b, a)``, each of length ``order + 1``.

    ``cutoff`` is normalised to half the sample rate and must lie in (0, 1).
    """
    if order < 1:
        raise ValueError("filter order must be at least 1")
    if not 0.0 < cutoff < 1.0:
        raise ValueError("cutoff must lie in (0, 1)")
    scale = _butter_scale(order, cutoff)
    b = np.array([math.comb(order, k) for k in range(order + 1)], dtype=np.float64)
    b *= scale
    a = _butter_denominator(order, cutoff)
    return b, a