import math

import numpy as np
import pytest

from audiocontent.filter import Filter, butter_lowpass


@pytest.fixture
def noise():
    return np.random.default_rng(42).standard_normal(300)


def test_butter_order2_half_band():
    b, a = butter_lowpass(2, 0.5)
    assert b == pytest.approx([0.2928932, 2 * 0.2928932, 0.2928932], abs=1e-6)
    assert a == pytest.approx([1.0, 0.0, 0.1715729], abs=1e-6)


@pytest.mark.parametrize("order", [1, 2, 3, 4, 5, 6])
@pytest.mark.parametrize("cutoff", [0.1, 0.3, 0.7])
def test_butter_unit_dc_gain_and_stable(order, cutoff):
    b, a = butter_lowpass(order, cutoff)
    assert len(b) == order + 1
    assert len(a) == order + 1
    assert a[0] == 1.0
    assert b.sum() / a.sum() == pytest.approx(1.0, rel=1e-9)
    assert np.all(np.abs(np.roots(a)) < 1.0)


def test_butter_numerator_is_binomial():
    b, _ = butter_lowpass(4, 0.2)
    assert b / b[0] == pytest.approx([math.comb(4, k) for k in range(5)])


@pytest.mark.parametrize("order,cutoff", [(0, 0.5), (2, 0.0), (2, 1.0), (2, -0.1)])
def test_butter_invalid_args(order, cutoff):
    with pytest.raises(ValueError):
        butter_lowpass(order, cutoff)


def test_filter_invalid_coefficients():
    with pytest.raises(ValueError):
        Filter([1.0, 0.5], [1.0])
    with pytest.raises(ValueError):
        Filter([], [])


def test_process_empty_raises():
    filt = Filter([1.0, 0.0], [1.0, 0.0])
    with pytest.raises(ValueError):
        filt.process([])
    with pytest.raises(ValueError):
        filt.process_direct_form2([])


def test_identity_filter(noise):
    filt = Filter([1.0, 0.0, 0.0], [1.0, 0.0, 0.0])
    assert filt.process(noise) == pytest.approx(noise)


def test_delay_filter(noise):
    filt = Filter([0.0, 1.0], [1.0, 0.0])
    out = filt.process(noise)
    assert out[0] == 0.0
    assert out[1:] == pytest.approx(noise[:-1])


def test_forms_agree(noise):
    b, a = butter_lowpass(4, 0.25)
    transposed = Filter(b, a).process(noise)
    direct = Filter(b, a).process_direct_form2(noise)
    assert transposed == pytest.approx(direct, abs=1e-10)


def test_blockwise_equals_whole(noise):
    b, a = butter_lowpass(3, 0.4)
    whole = Filter(b, a).process(noise)
    filt = Filter(b, a)
    pieces = np.concatenate([filt.process(noise[:100]), filt.process(noise[100:])])
    assert pieces == pytest.approx(whole, abs=1e-12)

    filt2 = Filter(b, a)
    pieces2 = np.concatenate(
        [filt2.process_direct_form2(noise[:50]), filt2.process_direct_form2(noise[50:])]
    )
    assert pieces2 == pytest.approx(whole, abs=1e-10)


def test_reset_clears_state(noise):
    b, a = butter_lowpass(2, 0.3)
    filt = Filter(b, a)
    first = filt.process(noise)
    filt.reset()
    assert filt.process(noise) == pytest.approx(first, abs=1e-12)


def test_filtfilt_constant_signal():
    b, a = butter_lowpass(4, 0.2)
    signal = np.full(200, 3.0)
    out = Filter(b, a).filtfilt(signal)
    assert out == pytest.approx(signal, abs=1e-6)


def test_filtfilt_keeps_slow_sine_without_phase_shift():
    b, a = butter_lowpass(2, 0.5)
    t = np.arange(1000)
    signal = np.sin(2 * np.pi * 0.005 * t)
    out = Filter(b, a).filtfilt(signal)
    assert np.max(np.abs(out[50:-50] - signal[50:-50])) < 1e-2


def test_filtfilt_does_not_disturb_state(noise):
    b, a = butter_lowpass(2, 0.3)
    filt = Filter(b, a)
    reference = Filter(b, a).process(noise)
    filt.filtfilt(noise)
    assert filt.process(noise) == pytest.approx(reference, abs=1e-12)


def test_filtfilt_repeatable(noise):
    b, a = butter_lowpass(3, 0.3)
    filt = Filter(b, a)
    assert filt.filtfilt(noise) == pytest.approx(filt.filtfilt(noise), abs=1e-12)


def test_filtfilt_too_short_raises():
    b, a = butter_lowpass(4, 0.2)
    with pytest.raises(ValueError):
        Filter(b, a).filtfilt(np.ones(12))