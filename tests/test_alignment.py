import itertools

import pytest

from alignment import HIGH_SCORE_PAIRS, map_residues, similarity_score
from errors import AlignmentLengthError

AMINO_ACIDS = "ACDEFGHIKLMNPQRSTVWYBZJX"

SEQUENCE_PAIRS = [
    ("AC-D", "A-CD"),
    ("AC-D-RWGV", "A-CD-KLG-"),
    ("----", "ACDE"),
    ("--A--", "-B---"),
    ("", ""),
    ("MKT-LLV--A", "M-TQLL-VGA"),
]


def _pairs(columns):
    return [(c.res_num1, c.res_num2) for c in columns]


def test_map_residues_example():
    assert _pairs(map_residues("AC-D", "A-CD")) == [(1, 1), (2, None), (None, 1), (3, 2)]


def test_map_residues_drops_fully_gapped_columns():
    assert _pairs(map_residues("A--C", "G--T")) == [(1, 1), (2, 2)]


def test_map_residues_length_mismatch():
    with pytest.raises(AlignmentLengthError):
        map_residues("ACD", "AC")


@pytest.mark.parametrize("seq1,seq2", SEQUENCE_PAIRS)
def test_map_residues_properties(seq1, seq2):
    columns = map_residues(seq1, seq2)

    assert all(c.res_num1 is not None or c.res_num2 is not None for c in columns)
    nums1 = [c.res_num1 for c in columns if c.res_num1 is not None]
    nums2 = [c.res_num2 for c in columns if c.res_num2 is not None]
    assert nums1 == list(range(1, len(seq1.replace("-", "")) + 1))
    assert nums2 == list(range(1, len(seq2.replace("-", "")) + 1))
    assert len(columns) == sum(1 for a, b in zip(seq1, seq2) if a != "-" or b != "-")


def test_similarity_identical():
    for aa in AMINO_ACIDS:
        assert similarity_score(aa, aa) == 3


def test_similarity_gap_or_empty():
    for aa in AMINO_ACIDS:
        assert similarity_score(aa, "-") == -1
        assert similarity_score("-", aa) == -1
        assert similarity_score(aa, "") == -1
    assert similarity_score("-", "-") == -1


def test_similarity_high_score_pairs():
    assert len(HIGH_SCORE_PAIRS) == 15
    for a, b in HIGH_SCORE_PAIRS:
        assert similarity_score(a, b) == 2
        assert similarity_score(b, a) == 2


def test_similarity_dissimilar():
    assert similarity_score("R", "D") == 1
    assert similarity_score("W", "L") == 1
    # not transitive: L-J and V-J are similar, L-V is not
    assert similarity_score("L", "V") == 1


def test_similarity_uses_first_variant():
    assert similarity_score("A/S", "A") == 3
    assert similarity_score("R/D", "K") == 2
    assert similarity_score("S/A", "A") == 1
    assert similarity_score("-/A", "A") == -1


def test_similarity_is_symmetric():
    values = list(AMINO_ACIDS) + ["-", "", "A/S", "K/R"]
    for a, b in itertools.product(values, repeat=2):
        assert similarity_score(a, b) == similarity_score(b, a)
