import pytest
from pileupCounter.parse_args import parse_args, check_args


def test_parse_args_defaults():
    options = parse_args("0.0.1", 4, ["-i", "a.bam", "-r", "ref.fa", "-e", "roi.bed"])
    assert options.bam == "a.bam"
    assert options.ref == "ref.fa"
    assert options.bed == "roi.bed"
    assert options.vcf is None
    assert options.min_mapq == 30
    assert options.exclude_flag == 3084
    assert options.max_depth == 100000
    assert options.threads == 4
    assert options.txt == "-"
    assert options.keep_tmp is False
    assert check_args(options) == ""


def test_parse_args_no_arguments(capsys):
    with pytest.raises(SystemExit) as e:
        parse_args("0.0.1", 4, [])
    assert e.value.code == 0
    assert "usage" in capsys.readouterr().out


def test_parse_args_version(capsys):
    with pytest.raises(SystemExit):
        parse_args("0.0.1", 4, ["--version"])
    assert "0.0.1" in capsys.readouterr().out


def test_check_args_vcf_only():
    options = parse_args("0.0.1", 4, ["--vcf", "-"])
    assert check_args(options) == ""


def test_check_args_vcf_and_bam():
    options = parse_args("0.0.1", 4, ["--vcf", "-", "-i", "a.bam"])
    assert check_args(options) != ""


def test_check_args_missing_pileup_input():
    options = parse_args("0.0.1", 4, ["-i", "a.bam", "-r", "ref.fa"])
    assert "--bed" in check_args(options)


def test_check_args_threads():
    options = parse_args("0.0.1", 4, ["-i", "a.bam", "-r", "ref.fa", "-e", "roi.bed", "-t", "0"])
    assert check_args(options) == "--threads must be at least 1"
