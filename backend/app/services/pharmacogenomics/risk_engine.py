"""
Risk Engine - Evaluates pharmacogenomic risk for a drug against parsed VCF variants.

Pipeline:
  drug → target gene → first variant whose star allele (else rsID) has a
  phenotype → drug-phenotype rule lookup → Recommendation

Single-variant lookup stands in for diplotype calling. Variants are scanned in
VCF line order and the first match wins, so line order decides precedence.
Missing data never raises; it comes back as an "Unknown" Recommendation with a
graded confidence score.
"""

import logging
import random
from typing import Optional, Sequence, Tuple

from .confidence import (
    NO_VARIANT_CONFIDENCE,
    PARTIAL_MATCH_CONFIDENCE,
    STRUCTURAL_ABSENCE_CONFIDENCE,
    RandomSource,
    draw_high_confidence,
)
from .models import LookupTables, Recommendation
from app.services.vcf.parser import ParsedVariant

logger = logging.getLogger(__name__)

UNKNOWN_RISK_LABEL = "Unknown"
UNKNOWN_PHENOTYPE_IMPACT_LABEL = "Unknown Phenotype Impact"

REASON_DRUG_NOT_MAPPED = "Drug not supported or mapped to a gene."
REASON_NO_VARIANTS = "No pharmacogenomic variants detected for this drug/gene pair."
REASON_NO_RULES = "No rules defined for this drug."
REASON_NO_PHENOTYPE_RULE = "Phenotype detected but no specific rule found."


class RiskEngine:
    """
    Evaluates pharmacogenomic risk for drug-gene-phenotype combinations.

    The lookup tables and the random source are injected; the engine holds no
    other state, so one instance can serve every request.
    """

    def __init__(self, tables: LookupTables, random_source: RandomSource = random.random):
        self.tables = tables
        self.random_source = random_source

    def evaluate(self, drug: str, variants: Sequence[ParsedVariant]) -> Recommendation:
        """
        Evaluate a drug (case-insensitive) against every parsed variant in the file.
        """
        upper_drug = drug.upper()
        target_gene = self.tables.drug_gene.get(upper_drug)

        if not target_gene:
            logger.info("Drug %s has no gene mapping", upper_drug)
            return self._create_unknown(REASON_DRUG_NOT_MAPPED, STRUCTURAL_ABSENCE_CONFIDENCE)

        gene_variants = [v for v in variants if v.gene == target_gene]
        match = self._find_phenotype(target_gene, gene_variants)

        if match is None:
            return self._create_unknown(REASON_NO_VARIANTS, NO_VARIANT_CONFIDENCE)

        phenotype, detected_variant = match

        drug_rules = self.tables.phenotype_rules.get(upper_drug)
        if not drug_rules:
            return self._create_unknown(REASON_NO_RULES, STRUCTURAL_ABSENCE_CONFIDENCE)

        rule = drug_rules.get(phenotype)
        if rule is None:
            logger.warning("No %s rule for phenotype %s (%s)", upper_drug, phenotype, target_gene)
            return Recommendation(
                risk_label=UNKNOWN_PHENOTYPE_IMPACT_LABEL,
                severity="low",
                recommendation=REASON_NO_PHENOTYPE_RULE,
                phenotype=phenotype,
                gene=target_gene,
                detected_variant=detected_variant,
                confidence_score=PARTIAL_MATCH_CONFIDENCE,
            )

        logger.info(
            "%s / %s / %s (%s) → %s",
            upper_drug, target_gene, phenotype, detected_variant, rule.risk_label,
        )
        return Recommendation(
            risk_label=rule.risk_label,
            severity=rule.severity,
            recommendation=rule.recommendation,
            phenotype=phenotype,
            gene=target_gene,
            detected_variant=detected_variant,
            confidence_score=draw_high_confidence(self.random_source),
        )

    def _find_phenotype(
        self, gene: str, gene_variants: Sequence[ParsedVariant]
    ) -> Optional[Tuple[str, str]]:
        """
        First (phenotype, matched identifier) in line order.
        Each variant's star allele is tried before its rsID.
        """
        gene_map = self.tables.gene_variants.get(gene)
        if not gene_map:
            return None

        for v in gene_variants:
            if v.star_allele and v.star_allele in gene_map:
                return gene_map[v.star_allele], v.star_allele
            if v.rs_id and v.rs_id in gene_map:
                return gene_map[v.rs_id], v.rs_id

        return None

    @staticmethod
    def _create_unknown(reason: str, score: float) -> Recommendation:
        return Recommendation(
            risk_label=UNKNOWN_RISK_LABEL,
            severity="low",
            recommendation=reason,
            confidence_score=score,
        )


def create_risk_engine(
    tables: LookupTables, random_source: RandomSource = random.random
) -> RiskEngine:
    """Factory function to create a RiskEngine instance."""
    return RiskEngine(tables, random_source=random_source)
