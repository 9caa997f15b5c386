"""
Shared fixtures: small lookup tables, VCF snippets and a stub text generator.
"""

from typing import List, Optional

import pytest

from app.services.pharmacogenomics.models import LookupTables

VCF_HEADER = (
    "##fileformat=VCFv4.2\n"
    "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\n"
)

CYP2C19_STAR2_LINE = "chr10\t96541616\trs4244285\tG\tA\t.\t.\tGENE=CYP2C19;STAR=*2"


def vcf(*lines: str) -> str:
    return VCF_HEADER + "\n".join(lines) + "\n"


class StubGenerator:
    """Records prompts and answers with a fixed text (or raises)."""

    def __init__(self, answer: Optional[str] = "CYP2C19 *2 reduces clopidogrel activation.", error: Exception = None):
        self.answer = answer
        self.error = error
        self.calls: List[dict] = []

    async def generate_text(self, prompt: str, system_prompt: Optional[str] = None) -> Optional[str]:
        self.calls.append({"prompt": prompt, "system_prompt": system_prompt})
        if self.error is not None:
            raise self.error
        return self.answer


class FixedRandom:
    """Deterministic stand-in for random.random."""

    def __init__(self, value: float = 0.5):
        self.value = value

    def __call__(self) -> float:
        return self.value


@pytest.fixture
def tables() -> LookupTables:
    return LookupTables(
        drug_gene={
            "CLOPIDOGREL": "CYP2C19",
            "CODEINE": "CYP2D6",
            "WARFARIN": "CYP2C9",
            "SIMVASTATIN": "SLCO1B1",
        },
        gene_variants={
            "CYP2C19": {
                "*2": "Poor Metabolizer",
                "*17": "Rapid Metabolizer",
                "rs4244285": "Intermediate Metabolizer",
                "rs12248560": "Rapid Metabolizer",
            },
            "CYP2D6": {
                "*4": "Poor Metabolizer",
                "*41": "Ultrarapid Metabolizer",
            },
            "CYP2C9": {
                "*3": "Poor Metabolizer",
            },
        },
        phenotype_rules={
            "CLOPIDOGREL": {
                "Poor Metabolizer": {
                    "risk_label": "HIGH",
                    "severity": "high",
                    "recommendation": "Use an alternative antiplatelet agent.",
                },
                "Intermediate Metabolizer": {
                    "risk_label": "MODERATE",
                    "severity": "moderate",
                    "recommendation": "Consider an alternative antiplatelet agent.",
                },
            },
            "CODEINE": {
                "Poor Metabolizer": {
                    "risk_label": "HIGH",
                    "severity": "high",
                    "recommendation": "Avoid codeine.",
                },
            },
        },
    )


@pytest.fixture
def fixed_random() -> FixedRandom:
    return FixedRandom(0.5)


@pytest.fixture
def stub_generator() -> StubGenerator:
    return StubGenerator()
