"""Differential residue conservation between two receptors."""
import logging
from typing import Iterable, Optional

import pandas as pd
from pydantic import ValidationError

from alignment import DISSIMILAR, map_residues, similarity_score
from cache import ParsedFileCache
from catalog import ReceptorCatalog
from errors import (
    ClassMismatchError, InvalidSequenceError, InvalidThresholdError, SequenceMissingError,
)
from schemas import (
    GAP, AlignedSequence, CategorizedResidue, Category, ComparisonResult,
    ConservationRecord, JoinedColumn, MappedColumn, Receptor, ResidueSide,
)
from sequences import read_alignment, read_conservation_table

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 90.0

EXPORT_COLUMNS = [
    "Category",
    "Residue1", "HumanAA1", "ConservedAA1", "Perc1", "Region1", "GPCRdb1",
    "Residue2", "HumanAA2", "ConservedAA2", "Perc2", "Region2", "GPCRdb2",
]
EXPORT_DELIMITERS = {"csv": ",", "tsv": "\t"}


def _join_side(res_num: Optional[int], table: dict[int, ConservationRecord]) -> ResidueSide:
    if res_num is None:
        return ResidueSide()

    record = table.get(res_num)
    if record is None:
        # Tables may cover fewer residues than the sequence; keep the number, default the rest
        return ResidueSide(res_num=res_num)

    return ResidueSide(
        res_num=res_num,
        perc=record.conservation_percent,
        human_aa=record.reference_aa,
        conserved_aa=record.conserved_aa,
        region=record.region,
        gpcrdb=record.gpcrdb_number,
    )


def join_conservation(
    columns: Iterable[MappedColumn],
    table1: dict[int, ConservationRecord],
    table2: dict[int, ConservationRecord],
) -> list[JoinedColumn]:
    """Attach each receptor's conservation data to the mapped columns."""
    return [
        JoinedColumn(
            side1=_join_side(column.res_num1, table1),
            side2=_join_side(column.res_num2, table2),
        )
        for column in columns
    ]


def _categorize_column(side1: ResidueSide, side2: ResidueSide, threshold: float) -> Optional[Category]:
    if side1.is_gap and side2.is_gap:
        return None

    if side2.is_gap:
        return Category.SPECIFIC1 if side1.perc >= threshold else None
    if side1.is_gap:
        return Category.SPECIFIC2 if side2.perc >= threshold else None

    conserved1 = side1.perc >= threshold
    conserved2 = side2.perc >= threshold

    if conserved1 and conserved2:
        if similarity_score(side1.conserved_aa, side2.conserved_aa) > DISSIMILAR:
            return Category.COMMON
        return Category.SPECIFIC_BOTH
    if conserved1:
        return Category.SPECIFIC1
    if conserved2:
        return Category.SPECIFIC2
    return None


def validate_threshold(threshold: float) -> float:
    if not 0 <= threshold <= 100:
        raise InvalidThresholdError(
            f"Threshold must be a percentage between 0 and 100, got {threshold}",
            {"threshold": threshold},
        )
    return float(threshold)


def categorize_residues(columns: Iterable[JoinedColumn], threshold: float) -> list[CategorizedResidue]:
    """
    Classify joined columns by conservation.

    Output keeps alignment column order. Columns where no side reaches the
    threshold are dropped; a gap side is reported with gap defaults.
    """
    threshold = validate_threshold(threshold)
    residues = []

    for column in columns:
        side1, side2 = column.side1, column.side2
        category = _categorize_column(side1, side2, threshold)
        if category is None:
            continue

        residues.append(CategorizedResidue(
            category=category,
            res_num1=side1.res_num,
            human_aa1=side1.human_aa,
            conserved_aa1=side1.conserved_aa,
            perc1=side1.perc,
            res_num2=side2.res_num,
            human_aa2=side2.human_aa,
            conserved_aa2=side2.conserved_aa,
            perc2=side2.perc,
            region1=side1.region,
            region2=side2.region,
            gpcrdb1=side1.gpcrdb,
            gpcrdb2=side2.gpcrdb,
        ))

    return residues


def sort_by_category(residues: Iterable[CategorizedResidue]) -> list[CategorizedResidue]:
    """Stable sort: common, specific_both, specific1, specific2."""
    return sorted(residues, key=lambda r: r.category.priority)


def summarize(residues: Iterable[CategorizedResidue]) -> dict[Category, int]:
    counts = {category: 0 for category in Category}
    for residue in residues:
        counts[residue.category] += 1
    return counts


def export_table(residues: Iterable[CategorizedResidue], fmt: str = "tsv") -> str:
    """Render categorized residues as a CSV or TSV table."""
    if fmt not in EXPORT_DELIMITERS:
        raise ValueError(f"Unsupported export format: {fmt}")

    def res_num(value):
        return GAP if value is None else value

    rows = [
        [
            r.category.label,
            res_num(r.res_num1), r.human_aa1, r.conserved_aa1, f"{r.perc1:.2f}", r.region1, r.gpcrdb1,
            res_num(r.res_num2), r.human_aa2, r.conserved_aa2, f"{r.perc2:.2f}", r.region2, r.gpcrdb2,
        ]
        for r in residues
    ]
    df = pd.DataFrame(rows, columns=EXPORT_COLUMNS)
    return df.to_csv(sep=EXPORT_DELIMITERS[fmt], index=False, lineterminator="\n")


class ComparisonEngine:
    """
    Compare two receptors of the same class.

    Parsed alignments and conservation tables are held in the injected
    cache, so repeated comparisons within a class only parse each file once.
    """

    def __init__(
        self,
        catalog: ReceptorCatalog,
        cache: Optional[ParsedFileCache] = None,
        default_threshold: float = DEFAULT_THRESHOLD,
    ):
        self.catalog = catalog
        self.cache = cache if cache is not None else ParsedFileCache()
        self.default_threshold = validate_threshold(default_threshold)

    def alignment(self, receptor: Receptor) -> dict[str, str]:
        return self.cache.get_or_load(self.catalog.alignment_path(receptor), read_alignment)

    def conservation(self, receptor: Receptor) -> dict[int, ConservationRecord]:
        return self.cache.get_or_load(self.catalog.conservation_path(receptor), read_conservation_table)

    def aligned_sequence(self, receptor: Receptor) -> AlignedSequence:
        sequence = self.alignment(receptor).get(receptor.gene_name)
        if not sequence:
            raise SequenceMissingError(
                f"Could not find the sequence of {receptor.gene_name} in the "
                f"class {receptor.receptor_class} alignment",
                {"gene": receptor.gene_name, "class": receptor.receptor_class},
            )
        try:
            return AlignedSequence(identifier=receptor.gene_name, sequence=sequence)
        except ValidationError as e:
            raise InvalidSequenceError(
                f"Aligned sequence of {receptor.gene_name} contains characters "
                f"other than A-Z and '-'",
                {"gene": receptor.gene_name, "class": receptor.receptor_class},
            ) from e

    def compare(self, gene1: str, gene2: str, threshold: Optional[float] = None) -> ComparisonResult:
        threshold = validate_threshold(self.default_threshold if threshold is None else threshold)

        receptor1 = self.catalog.get(gene1)
        receptor2 = self.catalog.get(gene2)
        if receptor1.receptor_class != receptor2.receptor_class:
            raise ClassMismatchError(
                "Receptors must belong to the same class",
                {
                    receptor1.gene_name: receptor1.receptor_class,
                    receptor2.gene_name: receptor2.receptor_class,
                },
            )

        seq1 = self.aligned_sequence(receptor1)
        seq2 = self.aligned_sequence(receptor2)

        columns = map_residues(seq1.sequence, seq2.sequence)
        joined = join_conservation(columns, self.conservation(receptor1), self.conservation(receptor2))
        residues = categorize_residues(joined, threshold)
        summary = summarize(residues)

        logger.info(
            f"Compared {receptor1.gene_name} and {receptor2.gene_name} at {threshold}%: "
            f"{len(columns)} columns, {len(residues)} categorized "
            + ", ".join(f"{category.value}={count}" for category, count in summary.items())
        )

        return ComparisonResult(
            receptor1=receptor1,
            receptor2=receptor2,
            threshold=threshold,
            categorized_residues=residues,
            summary=summary,
        )
