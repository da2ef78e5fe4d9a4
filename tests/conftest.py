import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from cache import ParsedFileCache
from catalog import ReceptorCatalog
from comparison import ComparisonEngine

# Column 5 is gapped in both receptors
CLASS_A_ALIGNMENT = """\
>sp|P08908|HTR1A_HUMAN 5-hydroxytryptamine receptor 1A
AC-D-
RWGV
>sp|P28223|HTR2A_HUMAN 5-hydroxytryptamine receptor 2A
A-CD-KLG-
>malformed_header
ACDDDKLGV
>sp|P28222|HTR1B_HUMAN 5-hydroxytryptamine receptor 1B
ACCD-KLGV
"""

HTR1A_TABLE = """\
residue_number\tconservation\tconserved_aa\taa\tregion\tgpcrdb
1\t95.0\tA\tA\tN-term\t1.25x25
2\t92.0\tC\tC\tTM1\t1.26x26
3\t50.0\tD\tD\tTM1\t1.27x27
4\t95.0\tR\tR\tTM1\t1.28x28
5\t99.0\tW\tW\tICL1\t12.48x48
6\t10.0\tG\tG\tICL1\t12.49x49
"""

HTR2A_TABLE = """\
residue_number\tconservation\tconserved_aa\taa\tregion\tgpcrdb
1\t96.0\tA/S\tA\tN-term\t1.25x25
2\t91.0\tC\tC\tTM1\t1.26x26
3\t97.0\tD\tD\tTM1\t1.27x27
4\t95.0\tK\tK\tTM1\t1.28x28
5\t99.0\tL\tL\tICL1\t12.48x48
6\t20.0\tG\tG\tICL1\t12.49x49
"""

RECEPTORS = [
    {
        "geneName": "HTR1A",
        "class": "A",
        "conservationFile": "/conservation_files/HTR1A_conservation.txt",
        "name": "5-hydroxytryptamine receptor 1A",
        "numOrthologs": 312,
        "lca": "Vertebrata",
        "gpcrdbId": "5ht1a_human",
    },
    {
        "geneName": "HTR2A",
        "class": "A",
        "conservationFile": "/conservation_files/HTR2A_conservation.txt",
        "name": "5-hydroxytryptamine receptor 2A",
        "numOrthologs": 298,
        "lca": "Vertebrata",
        "gpcrdbId": "5ht2a_human",
    },
    {
        "geneName": "DRD2",
        "class": "A",
        "conservationFile": "/conservation_files/DRD2_conservation.txt",
        "name": "D(2) dopamine receptor",
    },
    {
        "geneName": "GCGR",
        "class": "B1",
        "conservationFile": "/conservation_files/GCGR_conservation.txt",
        "name": "Glucagon receptor",
    },
]


@pytest.fixture
def data_dir(tmp_path) -> Path:
    (tmp_path / "alignments").mkdir()
    (tmp_path / "conservation_files").mkdir()
    (tmp_path / "alignments" / "classA_humans_MSA.fasta").write_text(CLASS_A_ALIGNMENT)
    (tmp_path / "conservation_files" / "HTR1A_conservation.txt").write_text(HTR1A_TABLE)
    (tmp_path / "conservation_files" / "HTR2A_conservation.txt").write_text(HTR2A_TABLE)
    (tmp_path / "receptors.json").write_text(json.dumps(RECEPTORS))
    return tmp_path


@pytest.fixture
def catalog(data_dir) -> ReceptorCatalog:
    return ReceptorCatalog.from_file(data_dir / "receptors.json", data_dir)


@pytest.fixture
def engine(catalog) -> ComparisonEngine:
    return ComparisonEngine(catalog, cache=ParsedFileCache())


@pytest.fixture
def client(engine):
    from main import app, get_engine

    app.dependency_overrides[get_engine] = lambda: engine
    yield TestClient(app)
    app.dependency_overrides.clear()
