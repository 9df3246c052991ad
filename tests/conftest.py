import pysam
import pytest

HEADER = {
    "HD": {"VN": "1.6", "SO": "coordinate"},
    "SQ": [{"SN": "chr1", "LN": 1000}, {"SN": "chr2", "LN": 1000}],
}


def make_read(header, name, tid, start, mapq=60, flag=99, mate_tid=None, length=20, seq=None):
    read = pysam.AlignedSegment(header)
    read.query_name = name
    read.query_sequence = "A" * length if seq is None else seq
    read.flag = flag
    read.reference_id = tid
    read.reference_start = start
    read.mapping_quality = mapq
    read.cigartuples = [(0, length)]
    read.next_reference_id = tid if mate_tid is None else mate_tid
    read.next_reference_start = start + 100
    read.template_length = 120
    read.query_qualities = pysam.qualitystring_to_array("I" * length)
    return read


@pytest.fixture
def bam_header():
    return pysam.AlignmentHeader.from_dict(HEADER)


@pytest.fixture
def bam_file(tmp_path, bam_header):
    path = str(tmp_path / "reads.bam")
    read_lst = [
        make_read(bam_header, "r1", 0, 100),
        make_read(bam_header, "r2", 0, 110, mapq=10),
        make_read(bam_header, "r3", 0, 120, flag=99 | 1024),
        make_read(bam_header, "r4", 0, 130, mate_tid=1),
        make_read(bam_header, "r5", 0, 145),
        make_read(bam_header, "r6", 0, 500),
        make_read(bam_header, "r7", 1, 50),
    ]
    with pysam.AlignmentFile(path, "wb", header=bam_header) as o:
        for read in read_lst:
            o.write(read)
    pysam.index(path)
    return path
