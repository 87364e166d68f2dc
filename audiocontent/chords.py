"""Chord identifiers, template-based chord probabilities and chord transition models."""

from __future__ import annotations

import math
from enum import IntEnum
from typing import Sequence, Union

import numpy as np

from .block_features import PitchChromaFeature

ArrayLike = Union[Sequence[float], np.ndarray]

_NUM_PITCH_CLASSES = 12
_MAJOR_INTERVALS = (0, 4, 7)
_MINOR_INTERVALS = (0, 3, 7)
_ZERO_THRESH = 1e-20


class Chord(IntEnum):
    """The 24 major and minor triads followed by the 'no chord' state."""

    C_MAJOR = 0
    CS_MAJOR = 1
    D_MAJOR = 2
    DS_MAJOR = 3
    E_MAJOR = 4
    F_MAJOR = 5
    FS_MAJOR = 6
    G_MAJOR = 7
    GS_MAJOR = 8
    A_MAJOR = 9
    AS_MAJOR = 10
    B_MAJOR = 11

    C_MINOR = 12
    CS_MINOR = 13
    D_MINOR = 14
    DS_MINOR = 15
    E_MINOR = 16
    F_MINOR = 17
    FS_MINOR = 18
    G_MINOR = 19
    GS_MINOR = 20
    A_MINOR = 21
    AS_MINOR = 22
    B_MINOR = 23

    NO_CHORD = 24


NUM_CHORDS = len(Chord)

_ROOTS = (
    "C", "C# {q}/Db", "D", "D# {q}/Eb", "E", "F",
    "F# {q}/Gb", "G", "G# {q}/Ab", "A", "A# {q}/Bb", "B",
)


def _build_names() -> dict[Chord, str]:
    names: dict[Chord, str] = {}
    for offset, quality in ((0, "Major"), (12, "Minor")):
        for index, root in enumerate(_ROOTS):
            names[Chord(offset + index)] = f"{root.format(q=quality)} {quality}"
    names[Chord.NO_CHORD] = "No Chord"
    return names


_NAMES = _build_names()


def _build_lookup() -> dict[str, Chord]:
    lookup: dict[str, Chord] = {}
    for chord, name in _NAMES.items():
        lookup[name] = chord
        for alias in name.split("/"):
            lookup[alias] = chord
    return lookup


_BY_NAME = _build_lookup()


def chord_name(chord: Chord | int) -> str:
    """Return the descriptive name of a chord, e.g. 'C# Major/Db Major'.

    Raises ValueError for an index that names no chord.
    """
    return _NAMES[Chord(chord)]


def chord_from_name(name: str) -> Chord:
    """Return the chord described by ``name`` ('Db Major', 'C# Major/Db Major', ...).

    Raises ValueError if the name is unknown.
    """
    try:
        return _BY_NAME[name]
    except KeyError:
        raise ValueError(f"unknown chord name: {name!r}") from None


def _template_matrix() -> np.ndarray:
    """Chord templates with equally weighted chord pitches (rows: chords)."""
    templates = np.zeros((NUM_CHORDS, _NUM_PITCH_CLASSES))
    weight = 1.0 / len(_MAJOR_INTERVALS)
    for root in range(_NUM_PITCH_CLASSES):
        for major, minor in zip(_MAJOR_INTERVALS, _MINOR_INTERVALS):
            templates[root, (root + major) % _NUM_PITCH_CLASSES] = weight
            templates[root + _NUM_PITCH_CLASSES, (root + minor) % _NUM_PITCH_CLASSES] = weight
    templates[Chord.NO_CHORD] += 1.0 / _NUM_PITCH_CLASSES
    return templates


class ChordTemplateMatcher:
    """Computes chord probabilities for one magnitude spectrum by pitch-chroma template matching."""

    def __init__(self, mag_spec_length: int, sample_rate: float):
        if mag_spec_length <= 0:
            raise ValueError("magnitude spectrum length must be positive")
        if sample_rate <= 0:
            raise ValueError("sample rate must be positive")
        self.mag_spec_length = int(mag_spec_length)
        self.sample_rate = float(sample_rate)
        self._chroma = PitchChromaFeature(self.mag_spec_length, self.sample_rate)
        self._templates = _template_matrix()

    def chord_probabilities(self, mag_spec: ArrayLike) -> np.ndarray:
        """Return the probability of each chord (indexed by ``Chord``), summing to one."""
        chroma = self._chroma.compute(mag_spec)
        if chroma.sum() <= _ZERO_THRESH:
            probs = np.zeros(NUM_CHORDS)
            probs[Chord.NO_CHORD] = 1.0
            return probs
        probs = self._templates @ chroma
        return probs / probs.sum()


_CIRCLE_OF_FIFTHS = (
    0, -5, 2, -3, 4, -1, 6, 1, -4, 3, -2, 5,
    -3, 4, -1, 6, 1, -4, 3, -2, 5, 0, -5, 2,
)


def chord_start_probabilities() -> np.ndarray:
    """Initial state probabilities; the 'no chord' state is twice as likely as any chord."""
    probs = np.full(NUM_CHORDS, 1.0 / (NUM_CHORDS + 1))
    probs[Chord.NO_CHORD] *= 2.0
    return probs


def chord_transition_matrix() -> np.ndarray:
    """Row-stochastic chord transition matrix derived from distances on the circle of fifths.

    Major and minor chords lie on two stacked circles; closer chords get
    higher transition probabilities.  The 'no chord' state is reached from
    and leads to every state with equal weight.
    """
    radius = 1.0
    distance = 0.5
    num = NUM_CHORDS - 1

    angles = 2.0 * math.pi * np.array(_CIRCLE_OF_FIFTHS, dtype=np.float64) / 12.0
    x = radius * np.cos(angles)
    y = radius * np.sin(angles)
    z = np.where(np.arange(num) < 12, distance, 0.0)

    trans = np.zeros((NUM_CHORDS, NUM_CHORDS))
    dx = x[:, None] - x[None, :]
    dy = y[:, None] - y[None, :]
    dz = z[:, None] - z[None, :]
    trans[:num, :num] = 0.1 + np.sqrt(dx * dx + dy * dy + dz * dz)

    # convert distances to similarities
    trans *= -1.0 / (0.1 + trans.max())
    trans += 1.0

    trans[Chord.NO_CHORD, :] = 1.0 / NUM_CHORDS
    trans[:, Chord.NO_CHORD] = 1.0 / NUM_CHORDS

    return trans / trans.sum(axis=1, keepdims=True)