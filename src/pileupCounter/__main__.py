__version__ = "0.0.1"

# modules
import sys
import pysam
import logging
import pysam.utils
import multiprocessing as mp
import pileupCounter.pileupCounter
from pileupCounter.parse_args import parse_args, check_args

logger = logging.getLogger("pileupCounter")


def main(arguments=sys.argv[1:]):
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )
    thread_count = mp.cpu_count()
    options = parse_args(
        program_version=__version__,
        default_threads=pileupCounter.pileupCounter.get_default_threads(),
        arguments=arguments,
    )
    message = check_args(options)
    if message:
        logger.error(message)
        sys.exit(1)
    if options.threads > thread_count:
        options.threads = thread_count

    if options.vcf is not None:
        if options.vcf != "-" and not pileupCounter.pileupCounter.check_file_exists("VCF", options.vcf):
            sys.exit(1)
        pileupCounter.pileupCounter.vcf2counts(
            options.vcf, # input # mpileup vcf text or - for stdin
            options.txt, # output # count table
        )
        return

    try:
        pileupCounter.pileupCounter.count(
            options.bam, # input # bamfile
            options.ref, # reference fasta
            options.bed, # regions of interest
            options.min_mapq, # int: 0 - 60
            options.exclude_flag, # samtools view -F
            options.max_depth, # bcftools mpileup -d
            options.threads, # number of threads
            options.keep_tmp, # true/false keep temporary files
            options.txt, # output # count table
        )
    except pysam.utils.SamtoolsError as e:
        logger.error("error during BAM file processing: {}".format(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
    sys.exit(0)
