import numpy as np
import pytest

from audiocontent.chords import (
    Chord,
    ChordTemplateMatcher,
    chord_from_name,
    chord_name,
    chord_start_probabilities,
    chord_transition_matrix,
)

LEN_BUFF = 2049


def _midi_to_freq(pitch):
    return 440.0 * 2.0 ** ((pitch - 69) / 12.0)


def _round(value):
    return int(value + 0.5)


def test_invalid_arguments():
    with pytest.raises(ValueError):
        ChordTemplateMatcher(0, 1.0)
    with pytest.raises(ValueError):
        ChordTemplateMatcher(LEN_BUFF, 0)


def test_create_valid():
    matcher = ChordTemplateMatcher(LEN_BUFF, 1.0)
    assert matcher.mag_spec_length == LEN_BUFF


def test_zeros_give_no_chord():
    matcher = ChordTemplateMatcher(LEN_BUFF, 32000)
    probs = matcher.chord_probabilities(np.zeros(LEN_BUFF))
    assert probs[Chord.NO_CHORD] == pytest.approx(1.0, abs=1e-6)
    assert probs.sum() == pytest.approx(1.0)


def test_wrong_length_rejected():
    matcher = ChordTemplateMatcher(LEN_BUFF, 32000)
    with pytest.raises(ValueError):
        matcher.chord_probabilities(np.zeros(LEN_BUFF - 1))


@pytest.mark.parametrize("quality", [0, 1])
@pytest.mark.parametrize("root", range(12))
def test_chord_templates(quality, root):
    sample_rate = 32000.0
    base = [(60, 64, 67), (60, 63, 67)][quality]
    matcher = ChordTemplateMatcher(LEN_BUFF, sample_rate)
    spec = np.zeros(LEN_BUFF)
    for pitch in base:
        freq = _midi_to_freq(pitch + root)
        spec[_round(freq / sample_rate * 2 * (LEN_BUFF - 1))] = 1.0
    probs = matcher.chord_probabilities(spec)
    assert int(np.argmax(probs)) == quality * 12 + root
    assert probs.sum() == pytest.approx(1.0)


def test_chord_names():
    assert chord_name(Chord.C_MAJOR) == "C Major"
    assert chord_name(Chord.CS_MAJOR) == "C# Major/Db Major"
    assert chord_name(Chord.AS_MINOR) == "A# Minor/Bb Minor"
    assert chord_name(Chord.NO_CHORD) == "No Chord"


def test_chord_from_name():
    assert chord_from_name("Db Major") is Chord.CS_MAJOR
    assert chord_from_name("C# Major") is Chord.CS_MAJOR
    assert chord_from_name("Gb Major") is Chord.FS_MAJOR
    assert chord_from_name("G# Minor/Ab Minor") is Chord.GS_MINOR
    assert chord_from_name("No Chord") is Chord.NO_CHORD


def test_chord_name_round_trip():
    for chord in Chord:
        assert chord_from_name(chord_name(chord)) is chord


def test_unknown_chord_name():
    with pytest.raises(ValueError):
        chord_from_name("H Major")
    with pytest.raises(ValueError):
        chord_name(25)


def test_start_probabilities():
    probs = chord_start_probabilities()
    assert probs.shape == (25,)
    assert probs.sum() == pytest.approx(1.0)
    assert probs[Chord.NO_CHORD] == pytest.approx(2.0 / 26.0)
    assert probs[Chord.C_MAJOR] == pytest.approx(1.0 / 26.0)


def test_transition_matrix_is_stochastic():
    trans = chord_transition_matrix()
    assert trans.shape == (25, 25)
    assert np.allclose(trans.sum(axis=1), 1.0)
    assert np.all(trans >= 0)


def test_transition_matrix_no_chord_row_uniform():
    trans = chord_transition_matrix()
    assert np.allclose(trans[Chord.NO_CHORD], 1.0 / 25.0)


def test_transition_matrix_prefers_staying():
    trans = chord_transition_matrix()
    for chord in range(24):
        assert int(np.argmax(trans[chord])) == chord


def test_transition_closer_chords_more_likely():
    trans = chord_transition_matrix()
    # G major is a fifth away from C major, F# major is a tritone away
    assert trans[Chord.C_MAJOR, Chord.G_MAJOR] > trans[Chord.C_MAJOR, Chord.FS_MAJOR]