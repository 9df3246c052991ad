import os
import sys
import pysam
import pysam.bcftools
import natsort
import logging
from typing import Dict, List, Tuple

logger = logging.getLogger(__name__)

# samtools view -F 3084: unmapped, mate unmapped, duplicate, supplementary
EXCLUDE_FLAG = 3084


def get_tname2tsize(bam_file: str) -> Dict[str, int]:
    alignments = pysam.AlignmentFile(bam_file, "rb")
    tname2tsize_hsh = dict(zip(alignments.references, alignments.lengths))
    alignments.close()
    return tname2tsize_hsh


def load_bed(bed_file: str) -> Dict[str, List[Tuple[str, int, int]]]:
    """
    Load BED regions (0-based, half-open) grouped by chromosome.
    Overlapping and book-ended regions are merged and chromosomes are returned
    in natural sort order.
    """
    chrom2regions = {}
    for line in open(bed_file):
        if line.strip() == "" or line.startswith(("#", "track", "browser")):
            continue
        field_lst = line.split()
        try:
            chrom, start, end = field_lst[0], int(field_lst[1]), int(field_lst[2])
        except (IndexError, ValueError):
            logger.error("{} is not a valid BED line: {}".format(bed_file, line.rstrip()))
            sys.exit(1)
        if chrom not in chrom2regions:
            chrom2regions[chrom] = []
        chrom2regions[chrom].append((start, end))

    chrom2loci = {}
    for chrom in natsort.natsorted(chrom2regions):
        loci_lst = []
        for start, end in sorted(chrom2regions[chrom]):
            if loci_lst and start <= loci_lst[-1][2]:
                _chrom, loci_start, loci_end = loci_lst[-1]
                loci_lst[-1] = (chrom, loci_start, max(loci_end, end))
            else:
                loci_lst.append((chrom, start, end))
        chrom2loci[chrom] = loci_lst
    return chrom2loci


def is_proper_read(
    line: pysam.AlignedSegment,
    min_mapq: int,
    exclude_flag: int
) -> bool:
    if line.flag & exclude_flag:
        return False
    if line.mapping_quality < min_mapq:
        return False
    # samtools view RNEXT == "=": mate is on the same reference sequence
    if line.next_reference_id < 0 or line.next_reference_id != line.reference_id:
        return False
    return True


def filter_chrom_reads(
    bam_file: str,
    loci_lst: List[Tuple[str, int, int]],
    min_mapq: int,
    exclude_flag: int,
    out_file: str,
) -> int:
    """
    Write reads that overlap the (merged, sorted) loci of one chromosome and
    pass the read filter. A read spanning several loci is written once.
    """
    read_count = 0
    alignments = pysam.AlignmentFile(bam_file, "rb")
    o = pysam.AlignmentFile(out_file, "wb", template=alignments)
    prev_end = None
    for chrom, loci_start, loci_end in loci_lst:
        for line in alignments.fetch(chrom, loci_start, loci_end):
            if prev_end is not None and line.reference_start < prev_end:
                continue  # already written with the previous loci
            if is_proper_read(line, min_mapq, exclude_flag):
                o.write(line)
                read_count += 1
        prev_end = loci_end
    o.close()
    alignments.close()
    return read_count


def index_bam(bam_file: str, threads: int) -> None:
    if not os.path.exists("{}.bai".format(bam_file)) and not os.path.exists(
        "{}.csi".format(bam_file)
    ):
        logger.info("indexing {}".format(bam_file))
        pysam.index("-@", str(threads), bam_file)


def index_fasta(ref_file: str) -> None:
    if not os.path.exists("{}.fai".format(ref_file)):
        logger.info("indexing {}".format(ref_file))
        pysam.faidx(ref_file)


def merge_bams(bam_lst: List[str], out_file: str, threads: int) -> None:
    unsorted_bam = "{}.unsorted.bam".format(out_file)
    if len(bam_lst) == 1:
        os.rename(bam_lst[0], unsorted_bam)
    else:
        pysam.cat("-o", unsorted_bam, *bam_lst)
        for bam in bam_lst:
            os.remove(bam)
    pysam.sort("-@", str(threads), "-o", out_file, unsorted_bam)
    os.remove(unsorted_bam)
    pysam.index("-@", str(threads), out_file)


def mpileup(
    bam_file: str,
    ref_file: str,
    bed_file: str,
    max_depth: int,
    threads: int,
    out_file: str,
) -> None:
    # the pysam dispatcher captures stdout itself, so the VCF text is returned
    vcf = pysam.bcftools.mpileup(
        "-a", "INFO/AD",
        "-d", str(max_depth),
        "--threads", str(threads),
        "-f", ref_file,
        "-R", bed_file,
        "-Ov",
        bam_file,
    )
    with open(out_file, "w") as o:
        o.write(vcf)
