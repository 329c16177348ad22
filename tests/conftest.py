import pytest

from ovlrefine.core.io import ReadStore
from ovlrefine.core.models import ReadRecord

from tests.helpers import GENOME


@pytest.fixture
def genome():
    return GENOME


@pytest.fixture
def genome_reads():
    """Target read is the whole genome, query read an interior piece of it."""
    return ReadStore([
        ReadRecord("target", GENOME.encode()),
        ReadRecord("query", GENOME[10:70].encode()),
    ])


@pytest.fixture
def reads_fasta(tmp_path):
    p = tmp_path / "reads.fasta"
    with open(p, "w") as f:
        f.write(f">target\n{GENOME}\n")
        f.write(f">query\n{GENOME[10:70]}\n")
    return p


@pytest.fixture
def overlaps_paf(tmp_path):
    p = tmp_path / "overlaps.paf"
    fields = ["query", 60, 0, 60, "+", "target", 80, 5, 75, 60, 70, 255]
    with open(p, "w") as f:
        f.write("\t".join(str(x) for x in fields) + "\n")
    return p
