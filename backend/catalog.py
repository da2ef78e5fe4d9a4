"""Static receptor catalog."""
import json
import logging
from pathlib import Path
from typing import Iterable, Optional

from errors import DataFileMissingError, NotFoundError
from schemas import Receptor

logger = logging.getLogger(__name__)

ALIGNMENT_TEMPLATE = "alignments/class{receptor_class}_humans_MSA.fasta"


class ReceptorCatalog:
    """Receptors and the data files that belong to them."""

    def __init__(self, receptors: Iterable[Receptor], data_dir: Path):
        self.data_dir = Path(data_dir)
        self._receptors: list[Receptor] = []
        self._by_gene: dict[str, Receptor] = {}

        for receptor in receptors:
            key = receptor.gene_name.lower()
            if key in self._by_gene:
                logger.warning(f"Duplicate catalog entry for {receptor.gene_name}, keeping the first")
                continue
            self._by_gene[key] = receptor
            self._receptors.append(receptor)

    @classmethod
    def from_file(cls, path: Path, data_dir: Path) -> "ReceptorCatalog":
        path = Path(path)
        if not path.exists():
            raise DataFileMissingError(f"Receptor catalog not found: {path}", {"path": str(path)})

        with open(path) as f:
            receptors = [Receptor(**entry) for entry in json.load(f)]

        logger.info(f"Loaded {len(receptors)} receptors from {path}")
        return cls(receptors, data_dir)

    def __len__(self) -> int:
        return len(self._receptors)

    def __iter__(self):
        return iter(self._receptors)

    def get(self, gene: str) -> Receptor:
        """Case-insensitive exact lookup by gene name."""
        receptor = self._by_gene.get(gene.strip().lower())
        if receptor is None:
            raise NotFoundError(f"Receptor not found in the database: {gene}", {"gene": gene})
        return receptor

    def search(
        self,
        query: str = "",
        receptor_class: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Receptor]:
        """Receptors whose gene or protein name contains query (case-insensitive)."""
        query = query.strip().lower()
        matches = []

        for receptor in self._receptors:
            if receptor_class is not None and receptor.receptor_class != receptor_class:
                continue
            if query and query not in receptor.gene_name.lower() and query not in receptor.name.lower():
                continue
            matches.append(receptor)
            if limit is not None and len(matches) >= limit:
                break

        return matches

    def resolve(self, relative: str) -> Path:
        # Catalog paths are web-root style ("/conservation_files/X.txt")
        return self.data_dir / relative.lstrip("/")

    def alignment_path(self, receptor: Receptor) -> Path:
        return self.resolve(ALIGNMENT_TEMPLATE.format(receptor_class=receptor.receptor_class))

    def conservation_path(self, receptor: Receptor) -> Path:
        return self.resolve(receptor.conservation_file)
