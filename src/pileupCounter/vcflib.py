import logging
from typing import Dict, List, Optional, TextIO, Tuple, Union

logger = logging.getLogger(__name__)

BASE_LST = ["A", "C", "G", "T"]
HEADER_LST = ["Chrom", "Pos", "ID", "Ref", "A_count", "C_count", "G_count", "T_count"]


class VCF:
    def __init__(self, line: str):
        field_lst = line.rstrip("\r\n").split("\t")
        # pad short lines so that every attribute exists
        if len(field_lst) < 8:
            field_lst.extend([""] * (8 - len(field_lst)))
        self.chrom = field_lst[0]
        self.pos = to_pos(field_lst[1])
        self.id = field_lst[2]
        self.ref = field_lst[3]
        self.alt = field_lst[4]
        self.info = field_lst[7]


def to_pos(pos: str) -> Union[int, str]:
    if pos.isascii() and pos.isdigit():
        return int(pos)
    return pos


def is_comment(line: str) -> bool:
    return line.startswith("#")


def parse_record(line: str) -> Optional[VCF]:
    if is_comment(line):
        return None
    return VCF(line)


def get_info_hsh(info: str) -> Dict[str, Optional[str]]:
    info_hsh = {}
    for token in info.split(";"):
        if token == "":
            continue
        if "=" in token:
            key, value = token.split("=", 1)
        else:  # flag
            key, value = token, None
        info_hsh[key] = value
    return info_hsh


def get_allele_depth(info: str) -> Optional[str]:
    return get_info_hsh(info).get("AD")


def get_alleles(ref: str, alt: str) -> List[str]:
    """
    Reference allele followed by the alternate alleles.
    Symbolic alleles (<*>, <NON_REF>) keep their position in the list.
    """
    allele_lst = [ref]
    if alt != "":
        allele_lst.extend(alt.split(","))
    return allele_lst


def to_depth(depth: str) -> int:
    try:
        return max(int(depth), 0)
    except ValueError:
        return 0


def get_depths(allele_depth: Optional[str]) -> List[int]:
    if allele_depth is None or allele_depth == "":
        return []
    return [to_depth(depth) for depth in allele_depth.split(",")]


def get_base_counts(allele_lst: List[str], depth_lst: List[int]) -> Dict[str, int]:
    """
    Pair alleles with allele depths by position and return A, C, G and T counts.

    Only the positions present in both lists are visited. Multi-base and
    symbolic alleles are visited but never written to a count.
    """
    base2count = {base: 0 for base in BASE_LST}
    for allele, depth in zip(allele_lst, depth_lst):
        if allele in base2count:
            base2count[allele] = depth
    return base2count


def get_site_counts(vcf: VCF) -> Tuple[str, Union[int, str], str, str, int, int, int, int]:
    allele_lst = get_alleles(vcf.ref, vcf.alt)
    depth_lst = get_depths(get_allele_depth(vcf.info))
    if depth_lst and len(depth_lst) != len(allele_lst):
        logger.debug(
            "{}:{} has {} alleles and {} allele depths".format(
                vcf.chrom, vcf.pos, len(allele_lst), len(depth_lst)
            )
        )
    base2count = get_base_counts(allele_lst, depth_lst)
    return (
        vcf.chrom,
        vcf.pos,
        vcf.id,
        vcf.ref,
        base2count["A"],
        base2count["C"],
        base2count["G"],
        base2count["T"],
    )


def format_row(row: tuple) -> str:
    return "{}\n".format("\t".join([str(i) for i in row]))


def write_header(o: TextIO) -> None:
    o.write(format_row(HEADER_LST))


def vcf2counts(vcf_stream: TextIO, o: TextIO) -> int:
    """Write the count table for a VCF text stream and return the number of sites."""
    site_count = 0
    write_header(o)
    for line in vcf_stream:
        vcf = parse_record(line)
        if vcf is None:
            continue
        o.write(format_row(get_site_counts(vcf)))
        site_count += 1
    return site_count
