import os
import sys
import time
import logging
import tempfile
import pileupCounter.bamlib
import pileupCounter.vcflib
import multiprocessing as mp
from typing import Dict, List, Optional, TextIO, Tuple

logger = logging.getLogger(__name__)


def get_default_threads() -> int:
    cpu_count = mp.cpu_count()
    return max(1, min(cpu_count - 1, 8))


def check_file_exists(label: str, file_path: str) -> bool:
    if file_path is None or not os.path.isfile(file_path):
        logger.error("{} file {} does not exist".format(label, file_path))
        return False
    return True


def open_output(out_file: str) -> TextIO:
    if out_file == "-":
        return sys.stdout
    return open(out_file, "w")


def vcf2counts(vcf_file: str, out_file: str) -> int:
    vcf_stream = sys.stdin if vcf_file == "-" else open(vcf_file)
    o = open_output(out_file)
    try:
        site_count = pileupCounter.vcflib.vcf2counts(vcf_stream, o)
    finally:
        if o is not sys.stdout:
            o.close()
        if vcf_stream is not sys.stdin:
            vcf_stream.close()
    return site_count


def filter_bam(
    bam_file: str,
    chrom2loci: Dict[str, List[Tuple[str, int, int]]],
    min_mapq: int,
    exclude_flag: int,
    threads: int,
    tmpdir: str,
) -> Optional[str]:

    tname2tsize = pileupCounter.bamlib.get_tname2tsize(bam_file)
    chrom_lst = []
    for chrom in chrom2loci:
        if chrom not in tname2tsize:
            logger.warning("{} is not in the BAM header and will be skipped".format(chrom))
            continue
        chrom_lst.append(chrom)
    if len(chrom_lst) == 0:
        return None

    chrom_bam_lst = [os.path.join(tmpdir, "{}.filtered.bam".format(i)) for i in range(len(chrom_lst))]
    filter_arg_lst = [
        (bam_file, chrom2loci[chrom], min_mapq, exclude_flag, chrom_bam)
        for chrom, chrom_bam in zip(chrom_lst, chrom_bam_lst)
    ]
    logger.info("filtering reads with {} threads".format(threads))
    if threads == 1 or len(chrom_lst) == 1:
        read_count_lst = [
            pileupCounter.bamlib.filter_chrom_reads(*filter_arg) for filter_arg in filter_arg_lst
        ]
    else:
        p = mp.Pool(min(threads, len(chrom_lst)))
        read_count_lst = p.starmap(pileupCounter.bamlib.filter_chrom_reads, filter_arg_lst)
        p.close()
        p.join()
    logger.info("{} reads passed the read filter".format(sum(read_count_lst)))

    filtered_bam = os.path.join(tmpdir, "filtered.bam")
    pileupCounter.bamlib.merge_bams(chrom_bam_lst, filtered_bam, threads)
    return filtered_bam


def count(
    bam_file: str,
    ref_file: str,
    bed_file: str,
    min_mapq: int,
    exclude_flag: int,
    max_depth: int,
    threads: int,
    keep_tmp: bool,
    out_file: str,
) -> None:

    state = 1
    for label, file_path in [("BAM", bam_file), ("reference", ref_file), ("BED", bed_file)]:
        if not check_file_exists(label, file_path):
            state = 0
    if state == 0:
        sys.exit(1)

    start = time.time() / 60
    logger.info("loading regions of interest")
    chrom2loci = pileupCounter.bamlib.load_bed(bed_file)
    pileupCounter.bamlib.index_bam(bam_file, threads)
    pileupCounter.bamlib.index_fasta(ref_file)

    if keep_tmp:
        tmpdir = tempfile.mkdtemp(prefix="pileupCounter.")
        logger.info("temporary files are kept in {}".format(tmpdir))
        site_count = _count(bam_file, ref_file, bed_file, chrom2loci, min_mapq, exclude_flag, max_depth, threads, tmpdir, out_file)
    else:
        with tempfile.TemporaryDirectory(prefix="pileupCounter.") as tmpdir:
            site_count = _count(bam_file, ref_file, bed_file, chrom2loci, min_mapq, exclude_flag, max_depth, threads, tmpdir, out_file)

    end = time.time() / 60
    duration = end - start
    logger.info("pileupCounter counted {} sites".format(site_count))
    logger.info("pileupCounter took {:.2f} minutes".format(duration))


def _count(
    bam_file: str,
    ref_file: str,
    bed_file: str,
    chrom2loci: Dict[str, List[Tuple[str, int, int]]],
    min_mapq: int,
    exclude_flag: int,
    max_depth: int,
    threads: int,
    tmpdir: str,
    out_file: str,
) -> int:

    filtered_bam = filter_bam(bam_file, chrom2loci, min_mapq, exclude_flag, threads, tmpdir)
    if filtered_bam is None:
        logger.warning("none of the regions of interest are in {}".format(bam_file))
        o = open_output(out_file)
        pileupCounter.vcflib.write_header(o)
        if o is not sys.stdout:
            o.close()
        return 0

    logger.info("running bcftools mpileup with {} threads".format(threads))
    vcf_file = os.path.join(tmpdir, "mpileup.vcf")
    pileupCounter.bamlib.mpileup(filtered_bam, ref_file, bed_file, max_depth, threads, vcf_file)
    logger.info("finished bcftools mpileup")
    return vcf2counts(vcf_file, out_file)
