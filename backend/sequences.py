"""Alignment and conservation table parsing."""
import logging
from pathlib import Path
from typing import Optional, TextIO, Union

from Bio import SeqIO
from pydantic import ValidationError

from errors import DataFileMissingError, MalformedRecordError
from schemas import ConservationRecord

logger = logging.getLogger(__name__)

CONSERVATION_COLUMNS = 6
HEADER_FIELDS = {"residue_number", "residue"}

PathLike = Union[str, Path]


def parse_gene_symbol(header: str) -> Optional[str]:
    """Gene symbol from a UniProt-style header, e.g. sp|P08908|HTR1A_HUMAN -> HTR1A."""
    parts = header.strip().split("|")
    if len(parts) < 3:
        return None
    symbol = parts[2].split("_")[0].strip()
    return symbol or None


def parse_alignment(handle: TextIO, source: str = "<stream>") -> dict[str, str]:
    """Parse a multi-FASTA alignment into gene symbol -> aligned sequence.

    Records whose header does not follow the pipe-delimited convention are
    skipped with a warning. If a symbol occurs twice the later record wins.
    """
    sequences: dict[str, str] = {}

    for record in SeqIO.parse(handle, "fasta"):
        symbol = parse_gene_symbol(record.description)
        if symbol is None:
            logger.warning(f"Unexpected FASTA header format in {source}: >{record.description}")
            continue
        if symbol in sequences:
            logger.warning(f"Duplicate gene symbol {symbol} in {source}, keeping the last record")
        sequences[symbol] = str(record.seq)

    return sequences


def read_alignment(path: PathLike) -> dict[str, str]:
    """Load an alignment file from disk."""
    path = Path(path)
    try:
        with open(path) as handle:
            sequences = parse_alignment(handle, source=str(path))
    except FileNotFoundError as e:
        raise DataFileMissingError(
            f"Alignment file not found: {path.name}", {"path": str(path)}
        ) from e

    logger.info(f"Loaded {len(sequences)} aligned sequences from {path}")
    return sequences


def _split_fields(line: str) -> list[str]:
    # Tab is canonical; rows without any tab fall back to whitespace columns
    if "\t" in line:
        fields = [field.strip() for field in line.split("\t")]
        # trailing tabs leave empty columns
        while len(fields) > CONSERVATION_COLUMNS and not fields[-1]:
            fields.pop()
        return fields
    return line.split()


def _is_header(first_field: str) -> bool:
    return first_field.lower() in HEADER_FIELDS or not first_field.isdigit()


def parse_conservation_table(handle: TextIO, source: str = "<stream>") -> dict[int, ConservationRecord]:
    """Parse a per-residue conservation table into residue number -> record.

    Columns: residue number, conservation percent, conserved AA, reference AA,
    region, GPCRdb number. Only the first non-empty row may be a header
    (non-numeric first field); every other row must have exactly six columns.
    """
    records: dict[int, ConservationRecord] = {}
    first_row = True

    for line_no, line in enumerate(handle, start=1):
        line = line.rstrip("\r\n")
        if not line.strip():
            continue

        fields = _split_fields(line)
        if first_row:
            first_row = False
            if _is_header(fields[0]):
                logger.debug(f"Skipping header row {line_no} in {source}")
                continue

        if len(fields) != CONSERVATION_COLUMNS:
            raise MalformedRecordError(
                f"Malformed conservation record in {source} line {line_no}: "
                f"expected {CONSERVATION_COLUMNS} columns, found {len(fields)}",
                {"source": source, "line": line_no},
            )

        try:
            record = ConservationRecord(
                residue_number=int(fields[0]),
                conservation_percent=float(fields[1]),
                conserved_aa=fields[2],
                reference_aa=fields[3],
                region=fields[4],
                gpcrdb_number=fields[5],
            )
        except (ValueError, ValidationError) as e:
            raise MalformedRecordError(
                f"Malformed conservation record in {source} line {line_no}: "
                f"invalid residue number or percent ({fields[0]!r}, {fields[1]!r})",
                {"source": source, "line": line_no},
            ) from e

        records[record.residue_number] = record

    return records


def read_conservation_table(path: PathLike) -> dict[int, ConservationRecord]:
    """Load a conservation table from disk."""
    path = Path(path)
    try:
        with open(path) as handle:
            records = parse_conservation_table(handle, source=path.name)
    except FileNotFoundError as e:
        raise DataFileMissingError(
            f"Conservation file not found: {path.name}", {"path": str(path)}
        ) from e

    logger.info(f"Loaded {len(records)} conservation records from {path}")
    return records
