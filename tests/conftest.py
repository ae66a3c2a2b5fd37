"""
Pytest configuration and fixtures for genorec tests.
"""

import sys
from pathlib import Path

import pytest

# Make the package importable without installation
sys.path.insert(0, str(Path(__file__).parent.parent / "scripts"))


# ============================================================================
# Path Fixtures
# ============================================================================

@pytest.fixture
def project_root():
    """Return the project root directory."""
    return Path(__file__).parent.parent


# ============================================================================
# SAM Fixtures
# ============================================================================

SAM_HEADER = """\
@HD\tVN:1.6\tSO:coordinate
@SQ\tSN:ref\tLN:45"""

SAM_ALIGNMENTS = [
    "r001\t99\tref\t7\t30\t8M2I4M1D3M\t=\t37\t39\tTTAGATAAAGGATACTG\t*",
    "r002\t0\tref\t9\t30\t3S6M1P1I4M\t*\t0\t0\tAAAAGATAAGGATA\t*",
    "r003\t0\tref\t9\t30\t5S6M\t*\t0\t0\tGCCTAAGCTAA\t*\tSA:Z:ref,29,-,6H5M,17,0;",
    "r004\t0\tref\t16\t30\t6M14N5M\t*\t0\t0\tATAGCTTCAGC\t*",
    "r003\t2064\tref\t29\t17\t6H5M\t*\t0\t0\tTAGGC\t*\tSA:Z:ref,9,+,5S6M,30,1;",
    "r001\t147\tref\t37\t30\t9M\t=\t7\t-39\tCAGCGGCAT\t*\tNM:i:1",
]


@pytest.fixture
def sam_header_text():
    """Header block of the example SAM file."""
    return SAM_HEADER


@pytest.fixture
def sam_lines():
    """Alignment lines of the example SAM file."""
    return list(SAM_ALIGNMENTS)


@pytest.fixture
def sam_text():
    """Complete example SAM file, newline terminated."""
    return SAM_HEADER + "\n" + "\n".join(SAM_ALIGNMENTS) + "\n"


# ============================================================================
# VCF Fixtures
# ============================================================================

VCF_LINE = (
    "20\t1110696\trs6040355\tA\tG,T\t67\tPASS\tNS=2;DP=10;AF=0.333,0.667;AA=T;DB"
    "\tGT:GQ:DP:HQ\t1|2:21:6:23,27\t2|1:2:0:18,2\t2/2:35:4"
)

VCF_HEADER = """\
##fileformat=VCFv4.2
##source=myImputationProgramV3.1
##INFO=<ID=DP,Number=1,Type=Integer,Description="Total Depth">
#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT\tNA00001\tNA00002\tNA00003"""

VCF_RECORDS = [
    "20\t14370\trs6054257\tG\tA\t29\tPASS\tNS=3;DP=14\tGT:GQ\t0|0:48\t1|0:48\t1/1:43",
    "20\t17330\t.\tT\tA\t3\tq10\tNS=3;DP=11\tGT:GQ\t0|0:49\t0|1:3\t0/0:41",
    VCF_LINE,
    "20\t1230237\t.\tT\t.\t47\tPASS\tNS=3;DP=13\tGT:GQ\t0|0:54\t0|0:48\t0/0:61",
]


@pytest.fixture
def vcf_line():
    """Multi-allelic VCF record with three samples."""
    return VCF_LINE


@pytest.fixture
def vcf_header_text():
    return VCF_HEADER


@pytest.fixture
def vcf_text():
    """Complete example VCF file, newline terminated."""
    return VCF_HEADER + "\n" + "\n".join(VCF_RECORDS) + "\n"


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def sample_config():
    """Provide a sample configuration dictionary."""
    return {
        "reader": {
            "strict": False,
            "skip_blank_lines": True,
            "compact_cigars": True,
        },
        "interval": {
            "expand_policy": "error",
        },
    }
