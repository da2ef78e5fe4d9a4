"""Residue numbering across an alignment and amino acid similarity."""
from errors import AlignmentLengthError
from schemas import MappedColumn

GAP_CHAR = "-"

# High-similarity pairs from a simplified BLOSUM80 (B, Z, J = Asx, Glx, Xle)
HIGH_SCORE_PAIRS = {
    ("R", "K"),
    ("N", "B"),
    ("D", "B"),
    ("Q", "E"),
    ("Q", "Z"),
    ("E", "Z"),
    ("H", "Y"),
    ("I", "V"),
    ("I", "J"),
    ("L", "M"),
    ("L", "J"),
    ("M", "J"),
    ("F", "Y"),
    ("W", "Y"),
    ("V", "J"),
}

IDENTICAL = 3
SIMILAR = 2
DISSIMILAR = 1
NOT_COMPARABLE = -1


def _first_variant(aa: str) -> str:
    return aa.split("/")[0].strip().upper()


def similarity_score(aa1: str, aa2: str) -> int:
    """
    Score two conserved residues for similarity.

    Either side may list several residues joined by '/'; only the first
    one is compared. Returns 3 for identical residues, 2 for a
    high-similarity pair, 1 for a dissimilar pair and -1 when either side
    is empty or a gap.
    """
    a = _first_variant(aa1 or "")
    b = _first_variant(aa2 or "")

    if not a or not b or a == GAP_CHAR or b == GAP_CHAR:
        return NOT_COMPARABLE
    if a == b:
        return IDENTICAL
    if (a, b) in HIGH_SCORE_PAIRS or (b, a) in HIGH_SCORE_PAIRS:
        return SIMILAR
    return DISSIMILAR


def map_residues(seq1: str, seq2: str) -> list[MappedColumn]:
    """
    Number the residues of two aligned sequences column by column.

    Each receptor keeps its own 1-based numbering that only advances on
    non-gap characters. Columns gapped in both sequences are dropped.
    """
    if len(seq1) != len(seq2):
        raise AlignmentLengthError(
            f"Aligned sequences differ in length ({len(seq1)} vs {len(seq2)})",
            {"length1": len(seq1), "length2": len(seq2)},
        )

    columns = []
    r1 = 0
    r2 = 0

    for aa1, aa2 in zip(seq1, seq2):
        res_num1 = None
        res_num2 = None

        if aa1 != GAP_CHAR:
            r1 += 1
            res_num1 = r1
        if aa2 != GAP_CHAR:
            r2 += 1
            res_num2 = r2

        if res_num1 is not None or res_num2 is not None:
            columns.append(MappedColumn(res_num1=res_num1, res_num2=res_num2))

    return columns
