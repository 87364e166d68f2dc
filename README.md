# audiocontent

Building blocks for audio content analysis, working on NumPy arrays:

- `audiocontent.instant_features`: features of one block of samples or one magnitude spectrum (spectral centroid, crest factor, decrease, flatness, flux, kurtosis, rolloff, skewness, slope, spread, tonal power ratio; autocorrelation coefficient, peak, RMS, standard deviation, zero crossing rate)
- `audiocontent.feature_types`: the `Feature` enumeration and the names of the features
- `audiocontent.block_features`: extractors that process successive blocks and may keep state between them, including MFCCs, pitch chroma and smoothed RMS and peak envelopes
- `audiocontent.chords`: chord probabilities from a magnitude spectrum by pitch-chroma template matching, and the start and transition probabilities for smoothing a chord sequence
- `audiocontent.filter`: a generic IIR filter with block-wise and zero-phase filtering, and Butterworth lowpass design
- `audiocontent.version`: `get_version()` and `get_build_date()`

## Installation

```
pip install .
```

With the test dependencies:

```
pip install .[test]
```

## Features of a single block

Spectral features take a magnitude spectrum of length `fft_length / 2 + 1`; results in Hz use the sample rate passed in.

```python
import numpy as np
from audiocontent.instant_features import spectral_centroid, spectral_rolloff, time_rms

spectrum = np.zeros(1025)
spectrum[10] = 1.0
print(spectral_centroid(spectrum, 2048.0))           # 10.0

flat = np.ones(101)
print(spectral_rolloff(flat, 200.0, kappa=0.75))     # 75.0

samples = np.sin(2 * np.pi * np.arange(1000) / 200)
print(time_rms(samples, 200.0))                      # about 0.7071
```

Empty or multi-dimensional input, a non-positive sample rate, a `kappa` outside (0, 1] or a lag outside the block raise `ValueError`.

## Extractors for successive blocks

`create_block_feature` returns the extractor for a `Feature`. `compute` always returns an array of length `dimension()`.

```python
import numpy as np
from audiocontent.feature_types import Feature, feature_name, feature_from_name
from audiocontent.block_features import create_block_feature

chroma = create_block_feature(Feature.SPECTRAL_PITCH_CHROMA, 1025, 32000.0)
print(chroma.dimension())                  # 12
values = chroma.compute(np.ones(1025))     # sums to one

rms = create_block_feature(Feature.TIME_RMS, 1024, 32000.0)
block_rms, smoothed_rms = rms.compute(np.ones(1024))

print(feature_name(Feature.TIME_RMS))      # TimeRms
print(feature_from_name("SpectralFlux"))   # Feature.SPECTRAL_FLUX
print(Feature.SPECTRAL_FLUX.is_spectral()) # True
```

Stateful extractors are `SpectralFluxFeature` (previous spectrum), `PeakEnvelopeFeature` and `RmsFeature` (envelope filters; both return two values per block). `MaxAcfFeature` returns the maximum of the normalised autocorrelation after its main lobe.

`set_additional_param` changes a feature's setting where `has_additional_param()` is true:

| Extractor | Parameter | Default |
|---|---|---|
| `MfccFeature` | number of coefficients | 13 |
| `PitchChromaFeature` | number of octaves | 4 |
| `RolloffFeature` | kappa, ignored outside (0, 1] | 0.85 |
| `TonalPowerRatioFeature` | peak threshold | 5e-4 |
| `AcfCoeffFeature` | lag | 19 |
| `MaxAcfFeature` | highest frequency in Hz | 2000 |
| `RmsFeature` | integration time in s | 0.3 |

On a plain `BlockFeature` it raises `RuntimeError`. `single_pole_coefficient(integration_time, sample_rate)` gives the smoothing coefficient used by the envelope filters.

## Chords

```python
import numpy as np
from audiocontent.chords import (
    Chord, ChordTemplateMatcher, chord_name, chord_from_name,
    chord_start_probabilities, chord_transition_matrix,
)

matcher = ChordTemplateMatcher(2049, 32000.0)
magnitude_spectrum = np.zeros(2049)
probs = matcher.chord_probabilities(magnitude_spectrum)
print(chord_name(int(np.argmax(probs))))   # No Chord

print(chord_from_name("Db Major"))         # Chord.CS_MAJOR
start = chord_start_probabilities()        # length 25
trans = chord_transition_matrix()          # 25 x 25, rows sum to one
```

## Filtering

```python
import numpy as np
from audiocontent.filter import Filter, butter_lowpass

b, a = butter_lowpass(4, 0.2)              # cutoff relative to half the sample rate
lowpass = Filter(b, a)

signal = np.random.default_rng(0).standard_normal(1000)
smoothed = lowpass.filtfilt(signal)        # zero phase
```

`Filter.process` (transposed direct form II) and `Filter.process_direct_form2` keep their state between calls, so a signal can be filtered block by block; `Filter.reset` clears it. `filtfilt` needs a signal longer than `3 * (len(b) - 1)` samples and leaves the filter reset.

## What the package does not do

It does not read audio files, cut a whole signal into blocks or compute spectra; pass it blocks of samples or magnitude spectra computed elsewhere. It provides chord start and transition probabilities but no Viterbi decoder, and it has no command-line program.