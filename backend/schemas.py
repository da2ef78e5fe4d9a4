"""Data models for the receptor comparison service."""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

GAP = "gap"
MISSING = "-"


class Receptor(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    gene_name: str = Field(alias="geneName")
    receptor_class: str = Field(alias="class")
    conservation_file: str = Field(alias="conservationFile")
    name: str = ""
    num_orthologs: Optional[int] = Field(default=None, alias="numOrthologs")
    lca: str = ""
    gpcrdb_id: str = Field(default="", alias="gpcrdbId")


class AlignedSequence(BaseModel):
    model_config = ConfigDict(frozen=True)

    identifier: str
    sequence: str = Field(pattern=r"^[A-Z-]*$")  # aligned, '-' for gaps


class ConservationRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    residue_number: int = Field(ge=1)
    conservation_percent: float = Field(ge=0, le=100)
    conserved_aa: str  # may hold variants joined by '/'
    reference_aa: str
    region: str
    gpcrdb_number: str


class MappedColumn(BaseModel):
    """Residue numbers of both receptors at one alignment column (None for gaps)."""
    model_config = ConfigDict(frozen=True)

    res_num1: Optional[int] = None
    res_num2: Optional[int] = None


class ResidueSide(BaseModel):
    """One receptor's view of a joined column, with defaults already filled in."""
    model_config = ConfigDict(frozen=True)

    res_num: Optional[int] = None
    perc: float = 0
    human_aa: str = MISSING
    conserved_aa: str = MISSING
    region: str = MISSING
    gpcrdb: str = MISSING

    @property
    def is_gap(self) -> bool:
        return self.res_num is None


class JoinedColumn(BaseModel):
    model_config = ConfigDict(frozen=True)

    side1: ResidueSide
    side2: ResidueSide


class Category(str, Enum):
    COMMON = "common"
    SPECIFIC_BOTH = "specific_both"
    SPECIFIC1 = "specific1"
    SPECIFIC2 = "specific2"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]

    @property
    def priority(self) -> int:
        return list(Category).index(self)


CATEGORY_LABELS = {
    Category.COMMON: "Common Residues",
    Category.SPECIFIC_BOTH: "Specifically Conserved for Both",
    Category.SPECIFIC1: "Specifically Conserved for Receptor 1",
    Category.SPECIFIC2: "Specifically Conserved for Receptor 2",
}


class CategorizedResidue(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    category: Category
    res_num1: Optional[int] = Field(default=None, alias="resNum1")
    human_aa1: str = Field(default=MISSING, alias="humanAa1")
    conserved_aa1: str = Field(default=MISSING, alias="conservedAa1")
    perc1: float = 0
    res_num2: Optional[int] = Field(default=None, alias="resNum2")
    human_aa2: str = Field(default=MISSING, alias="humanAa2")
    conserved_aa2: str = Field(default=MISSING, alias="conservedAa2")
    perc2: float = 0
    region1: str = MISSING
    region2: str = MISSING
    gpcrdb1: str = MISSING
    gpcrdb2: str = MISSING

    @field_validator("res_num1", "res_num2", mode="before")
    @classmethod
    def _parse_res_num(cls, value):
        return None if value == GAP else value

    @field_serializer("res_num1", "res_num2")
    def _serialize_res_num(self, value: Optional[int]):
        # Consumers expect the literal "gap" rather than null
        return GAP if value is None else value


class ComparisonRequest(BaseModel):
    gene1: str = Field(min_length=1)
    gene2: str = Field(min_length=1)
    threshold: Optional[float] = Field(default=None, ge=0, le=100)


class ComparisonResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    receptor1: Receptor
    receptor2: Receptor
    threshold: float
    categorized_residues: list[CategorizedResidue] = Field(alias="categorizedResidues")
    summary: dict[Category, int] = {}
