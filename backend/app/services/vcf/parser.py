from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Set, Union


logger = logging.getLogger(__name__)


# ----------------------------------------------------------------------
# Constants & Configuration
# ----------------------------------------------------------------------

TARGET_PHARMACOGENES: Set[str] = {
    "CYP2D6",
    "CYP2C19",
    "CYP2C9",
    "SLCO1B1",
    "TPMT",
    "DPYD",
}

# CHROM, POS, ID, REF, ALT, QUAL, FILTER, INFO
MIN_VCF_COLUMNS = 8

# INFO flags (keys without '=') are recorded with this value
INFO_FLAG_VALUE = "true"

MISSING_ID = "."


@dataclass(frozen=True)
class ParsedVariant:
    gene: str
    rs_id: str
    chromosome: str
    position: str
    ref: str
    alt: str
    info: Mapping[str, str] = field(default_factory=dict)
    star_allele: Optional[str] = None

    def __post_init__(self) -> None:
        # Read-only view over a private copy of the INFO entries
        object.__setattr__(self, "info", MappingProxyType(dict(self.info)))


def parse_vcf(content: Union[str, bytes, Iterable[str]]) -> List[ParsedVariant]:
    """
    Parse raw VCF text and return the variants annotated with one of the
    6 target genes: CYP2D6, CYP2C19, CYP2C9, SLCO1B1, TPMT, DPYD.

    Header/comment lines and blank lines are skipped. Malformed data lines
    (fewer than 8 columns, or an empty CHROM/POS/REF/ALT/INFO) are dropped
    without raising. Records keep their source line order.
    """
    variants: List[ParsedVariant] = []
    dropped = 0

    for raw in _normalize_to_lines(content):
        line = raw.rstrip("\r\n")
        if not line or line.startswith("#"):
            continue

        variant = _parse_variant_line(line)
        if variant is None:
            dropped += 1
            continue
        variants.append(variant)

    logger.debug("Parsed %d target-gene variants (%d lines skipped)", len(variants), dropped)
    return variants


def _normalize_to_lines(content: Union[str, bytes, Iterable[str]]) -> Iterator[str]:
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="replace")
    if isinstance(content, str):
        yield from content.split("\n")
        return
    yield from content


def parse_info_field(info: str) -> Dict[str, str]:
    """
    Split a VCF INFO column into a key → value map.

    Each ';' segment splits on its first '='; a segment without '=' is a flag
    and maps to "true".
    """
    out: Dict[str, str] = {}
    for item in info.split(";"):
        if not item:
            continue
        if "=" not in item:
            out[item] = INFO_FLAG_VALUE
            continue
        k, v = item.split("=", 1)
        if not k:
            continue
        out[k] = v
    return out


def _parse_variant_line(line: str) -> Optional[ParsedVariant]:
    cols = line.split("\t")
    if len(cols) < MIN_VCF_COLUMNS:
        # Malformed line → skip gracefully
        return None

    chrom, pos, vid, ref, alt, _qual, _flt, info_s = cols[:MIN_VCF_COLUMNS]

    if not chrom or not pos or not ref or not alt or not info_s:
        return None

    info = parse_info_field(info_s)

    # Exact match on a single GENE value; comma-separated gene lists are not split
    gene = info.get("GENE")
    if gene not in TARGET_PHARMACOGENES:
        return None

    return ParsedVariant(
        gene=gene,
        rs_id=vid if vid and vid != MISSING_ID else "",
        chromosome=chrom,
        position=pos,
        ref=ref,
        alt=alt,
        info=info,
        star_allele=info.get("STAR") or None,
    )
