# modules
import sys
import argparse
from pileupCounter.bamlib import EXCLUDE_FLAG

# argparse
def parse_args(program_version, default_threads, arguments=sys.argv[1:]):
    # main_arguments
    parser = argparse.ArgumentParser(
        add_help=True,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="pileupCounter returns A, C, G and T counts for each position in the regions of interest",
    )
    parser.add_argument(
        "-i",
        "--bam",
        type=str,
        required=False,
        help="coordinate sorted BAM file",
    )
    parser.add_argument(
        "-r",
        "--ref",
        type=str,
        required=False,
        help="reference genome FASTA file",
    )
    parser.add_argument(
        "-e",
        "--bed",
        type=str,
        required=False,
        help="regions of interest (chrom\tstart\tend)",
    )
    parser.add_argument(
        "--vcf",
        type=str,
        required=False,
        help="bcftools mpileup -a INFO/AD VCF text file to convert instead of running the pileup (- for stdin)",
    )
    parser.add_argument(
        "--min_mapq",
        type=int,
        default=30,
        required=False,
        help="minimum mapping quality score (default = 30)",
    )
    parser.add_argument(
        "--exclude_flag",
        type=int,
        default=EXCLUDE_FLAG,
        required=False,
        help="skip reads with any of these SAM flag bits set (default = {})".format(EXCLUDE_FLAG),
    )
    parser.add_argument(
        "--max_depth",
        type=int,
        default=100000,
        required=False,
        help="maximum number of reads per position and BAM file (default = 100000)",
    )
    parser.add_argument(
        "-t",
        "--threads",
        type=int,
        default=default_threads,
        required=False,
        help="maximum number of threads to be used (default = {})".format(default_threads),
    )
    parser.add_argument(
        "--keep_tmp",
        action="store_true",
        help="keep the temporary directory",
    )
    parser.add_argument(
        "-o",
        "--txt",
        type=str,
        default="-",
        required=False,
        help="file to return the count table (default = stdout)",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version="\n%(prog)s {version}\n".format(version=program_version),
    )
    # no arguments
    if len(arguments) == 0:
        parser.print_help()
        parser.exit()
    else:
        return parser.parse_args(arguments)


def check_args(options) -> str:
    """Return an error message for an invalid option combination, or an empty string."""
    pileup_option_lst = [options.bam, options.ref, options.bed]
    if options.vcf is not None:
        if any(option is not None for option in pileup_option_lst):
            return "--vcf cannot be combined with --bam, --ref or --bed"
        return ""
    if any(option is None for option in pileup_option_lst):
        return "--bam, --ref and --bed parameters are required if --vcf parameter is not provided"
    if options.threads < 1:
        return "--threads must be at least 1"
    if options.min_mapq < 0:
        return "--min_mapq must be at least 0"
    return ""
