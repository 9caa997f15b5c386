"""VCF parsing restricted to the target pharmacogenes."""

from .parser import TARGET_PHARMACOGENES, ParsedVariant, parse_info_field, parse_vcf

__all__ = ["TARGET_PHARMACOGENES", "ParsedVariant", "parse_info_field", "parse_vcf"]
