import gzip
import logging
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Sequence, Union

from Bio import SeqIO
from tqdm import tqdm

from ovlrefine.alignment.cigar import CigarKind, cigar_to_string
from ovlrefine.core.models import Overlap, ReadRecord, Strand
from ovlrefine.errors import CoordinateError, UnknownReadError

logger = logging.getLogger(__name__)

FASTQ_SUFFIXES = {".fq", ".fastq"}


def _open_text(path: Path):
    if path.suffix == ".gz":
        return gzip.open(path, "rt")
    return open(path, "r")


def _sequence_format(path: Path) -> str:
    suffixes = [s for s in path.suffixes if s != ".gz"]
    if suffixes and suffixes[-1].lower() in FASTQ_SUFFIXES:
        return "fastq"
    return "fasta"


class ReadStore:
    """Owns the full read set and hands out read sequences and slices."""

    def __init__(self, records: Iterable[ReadRecord] = ()):
        self._records: List[ReadRecord] = []
        self._index: Dict[str, int] = {}
        for record in records:
            self.add(record)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ReadStore":
        """Load reads from a FASTA or FASTQ file, optionally gzipped."""
        path = Path(path)
        fmt = _sequence_format(path)
        logger.info(f"Loading reads from {path} ({fmt})")

        store = cls()
        with _open_text(path) as handle:
            for record in tqdm(SeqIO.parse(handle, fmt), desc="Loading reads", unit=" reads"):
                store.add(ReadRecord(record.id, str(record.seq).upper().encode("ascii")))

        logger.info(f"Loaded {len(store)} reads")
        return store

    def add(self, record: ReadRecord) -> int:
        if record.name in self._index:
            raise ValueError(f"Duplicate read name: {record.name}")
        self._index[record.name] = len(self._records)
        self._records.append(record)
        return self._index[record.name]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ReadRecord]:
        return iter(self._records)

    def __getitem__(self, read_id: int) -> ReadRecord:
        if not 0 <= read_id < len(self._records):
            raise UnknownReadError(f"Read index {read_id} out of range (have {len(self._records)} reads)")
        return self._records[read_id]

    def index_of(self, name: str) -> int:
        try:
            return self._index[name]
        except KeyError:
            raise UnknownReadError(f"Unknown read: {name}") from None

    def name(self, read_id: int) -> str:
        return self[read_id].name

    def sequence(self, read_id: int) -> bytes:
        return self[read_id].seq

    def length(self, read_id: int) -> int:
        return len(self[read_id].seq)

    def slice(self, read_id: int, start: int, end: int) -> bytes:
        """Return bases [start, end) of a read."""
        seq = self.sequence(read_id)
        if not 0 <= start <= end <= len(seq):
            raise CoordinateError(
                f"Range {start}..{end} outside read {self.name(read_id)} of length {len(seq)}")
        return seq[start:end]


def load_overlaps(path: Union[str, Path], reads: ReadStore) -> List[Overlap]:
    """
    Load overlaps from a PAF file.

    Only the first nine columns are used. Self-overlaps and records naming
    reads that are not in the store are skipped.
    """
    path = Path(path)
    logger.info(f"Loading overlaps from {path}")

    overlaps = []
    skipped_unknown = 0
    skipped_self = 0
    with _open_text(path) as handle:
        for line_number, line in enumerate(handle, 1):
            if not line.strip():
                continue
            parts = line.rstrip("\n").split("\t")
            if len(parts) < 9:
                raise ValueError(f"{path}:{line_number}: expected at least 9 PAF columns, got {len(parts)}")

            qname, tname = parts[0], parts[5]
            if qname == tname:
                skipped_self += 1
                continue
            try:
                qid, tid = reads.index_of(qname), reads.index_of(tname)
            except UnknownReadError:
                skipped_unknown += 1
                continue

            overlaps.append(Overlap(
                qid=qid,
                qstart=int(parts[2]),
                qend=int(parts[3]),
                strand=Strand.from_symbol(parts[4]),
                tid=tid,
                tstart=int(parts[7]),
                tend=int(parts[8]),
            ))

    if skipped_unknown:
        logger.warning(f"Skipped {skipped_unknown} overlaps with unknown reads")
    if skipped_self:
        logger.debug(f"Skipped {skipped_self} self-overlaps")
    logger.info(f"Loaded {len(overlaps)} overlaps")
    return overlaps


def _paf_line(overlap: Overlap, reads: ReadStore) -> str:
    matches = sum(op.length for op in overlap.cigar if op.kind is CigarKind.MATCH)
    block_length = sum(op.length for op in overlap.cigar)
    fields = [
        reads.name(overlap.qid), reads.length(overlap.qid), overlap.qstart, overlap.qend,
        overlap.strand.value,
        reads.name(overlap.tid), reads.length(overlap.tid), overlap.tstart, overlap.tend,
        matches, block_length, 255,
        f"cg:Z:{cigar_to_string(overlap.cigar)}",
        f"ac:f:{overlap.accuracy:.4f}",
    ]
    return "\t".join(str(f) for f in fields)


def write_overlaps(path: Union[str, Path], overlaps: Sequence[Overlap], reads: ReadStore) -> int:
    """
    Write refined overlaps as PAF with cg:Z and ac:f tags.

    Returns:
        Number of records written; unrefined overlaps are skipped
    """
    written = 0
    with open(path, "w") as out:
        for overlap in overlaps:
            if not overlap.is_refined:
                continue
            out.write(_paf_line(overlap, reads) + "\n")
            written += 1

    logger.info(f"Wrote {written} refined overlaps to {path}")
    return written
