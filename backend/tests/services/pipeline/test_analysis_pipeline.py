"""
Integration tests for the analysis pipeline.
Tests the end-to-end flow from VCF text to the response, including caching.
"""

import asyncio

import pytest

from app.services.cache.explanation_cache import ExplanationCache, build_cache_key
from app.services.llm.explanation_service import ExplanationService
from app.services.pharmacogenomics.risk_engine import RiskEngine
from app.services.pharmacogenomics.signature import generate_signature
from app.services.pipeline.analysis_pipeline import AnalysisPipeline
from conftest import CYP2C19_STAR2_LINE, FixedRandom, StubGenerator, vcf

VCF_TEXT = vcf(CYP2C19_STAR2_LINE)


def make_pipeline(tables, generator, engine_draws=0.5, hit_draws=0.2, cache=None):
    return AnalysisPipeline(
        risk_engine=RiskEngine(tables, random_source=FixedRandom(engine_draws)),
        explanation_service=ExplanationService(generator, timeout_seconds=1.0),
        cache=cache if cache is not None else ExplanationCache(),
        random_source=FixedRandom(hit_draws),
    )


def run(pipeline, text=VCF_TEXT, drug="clopidogrel", mode="patient"):
    return asyncio.run(pipeline.run(text, drug, mode))


class TestPipelineResponse:

    def test_response_shape(self, tables, stub_generator):
        response = run(make_pipeline(tables, stub_generator))
        signature = generate_signature(["rs4244285"])

        assert response.drug == "CLOPIDOGREL"
        assert response.mode == "patient"
        assert response.cache_status == "MISS"
        assert response.risk_assessment.level == "HIGH"
        assert response.risk_assessment.confidence_score == pytest.approx(0.925)

        profile = response.pharmacogenomic_profile
        assert profile.gene == "CYP2C19"
        assert profile.phenotype == "Poor Metabolizer"
        assert profile.detected_variant == "*2"
        assert profile.total_variants_found == 1
        assert profile.signature_hash == signature
        assert response.genomic_signature_id == signature

        assert response.clinical_recommendation == "Use an alternative antiplatelet agent."
        assert response.llm_generated_explanation.summary == stub_generator.answer

        tree = response.explainability_tree
        assert tree.drug == "CLOPIDOGREL"
        assert tree.gene == "CYP2C19"
        assert tree.variant == "*2"
        assert tree.phenotype == "Poor Metabolizer"
        assert tree.risk == "HIGH"
        assert tree.recommendation == response.clinical_recommendation

        assert response.quality_metrics.vcf_quality == "PASS"
        assert response.quality_metrics.genotype_completeness == "High"

    def test_unsupported_drug(self, tables, stub_generator):
        response = run(make_pipeline(tables, stub_generator), drug="ASPIRIN")

        assert response.risk_assessment.level == "Unknown"
        assert response.risk_assessment.confidence_score == 0.1
        assert response.explainability_tree.variant == "None"
        assert response.pharmacogenomic_profile.gene is None

    def test_empty_vcf(self, tables, stub_generator):
        response = run(make_pipeline(tables, stub_generator), text="##fileformat=VCFv4.2\n")

        assert response.pharmacogenomic_profile.total_variants_found == 0
        assert response.quality_metrics.genotype_completeness == "Low"
        assert response.risk_assessment.confidence_score == 0.2

    def test_fresh_patient_id_per_miss(self, tables):
        pipeline = make_pipeline(tables, StubGenerator(answer=None))
        assert run(pipeline).patient_id != run(pipeline).patient_id


class TestPipelineCache:

    def test_miss_then_hit(self, tables, stub_generator):
        pipeline = make_pipeline(tables, stub_generator)

        first = run(pipeline)
        second = run(pipeline)

        assert first.cache_status == "MISS"
        assert second.cache_status == "HIT"
        assert len(stub_generator.calls) == 1

        # Hit score is redrawn from the pipeline's random source
        assert first.risk_assessment.confidence_score == pytest.approx(0.925)
        assert second.risk_assessment.confidence_score == pytest.approx(0.91)
        assert 0.90 <= second.risk_assessment.confidence_score < 0.95

        ignore = {"timestamp", "cache_status", "risk_assessment"}
        assert first.model_dump(exclude=ignore) == second.model_dump(exclude=ignore)
        assert first.risk_assessment.level == second.risk_assessment.level

    def test_variant_order_and_case_share_entry(self, tables, stub_generator):
        pipeline = make_pipeline(tables, stub_generator)
        other_line = "chr22\t42126611\trs3892097\tC\tT\t.\t.\tGENE=CYP2D6;STAR=*4"

        run(pipeline, text=vcf(CYP2C19_STAR2_LINE, other_line), drug="clopidogrel")
        second = run(pipeline, text=vcf(other_line, CYP2C19_STAR2_LINE), drug="CLOPIDOGREL")

        assert second.cache_status == "HIT"

    def test_mode_is_part_of_key(self, tables, stub_generator):
        pipeline = make_pipeline(tables, stub_generator)

        run(pipeline, mode="patient")
        expert = run(pipeline, mode="expert")

        assert expert.cache_status == "MISS"
        assert len(stub_generator.calls) == 2

    def test_failed_explanation_not_cached(self, tables):
        generator = StubGenerator(error=RuntimeError("LLM down"))
        cache = ExplanationCache()
        pipeline = make_pipeline(tables, generator, cache=cache)

        first = run(pipeline)
        second = run(pipeline)

        assert "temporarily unavailable" in first.llm_generated_explanation.summary
        assert len(cache) == 0
        assert second.cache_status == "MISS"
        assert len(generator.calls) == 2

    def test_stale_failure_entry_treated_as_miss(self, tables, stub_generator):
        cache = ExplanationCache()
        pipeline = make_pipeline(tables, stub_generator, cache=cache)

        failed = run(make_pipeline(tables, StubGenerator(answer=None)))
        key = build_cache_key(generate_signature(["rs4244285"]), "CLOPIDOGREL", "patient")
        cache.set(key, failed)  # planted directly, bypassing the summary check

        response = run(pipeline)

        assert response.cache_status == "MISS"
        assert response.llm_generated_explanation.summary == stub_generator.answer
        assert len(stub_generator.calls) == 1
        assert cache.get(key).llm_generated_explanation.summary == stub_generator.answer

    @pytest.mark.parametrize("drug, miss_score", [
        ("ASPIRIN", 0.1),
        ("CODEINE", 0.2),
    ])
    def test_hit_always_redraws_high_band_score(self, tables, stub_generator, drug, miss_score):
        pipeline = make_pipeline(tables, stub_generator)

        miss = run(pipeline, drug=drug)
        hit = run(pipeline, drug=drug)

        assert miss.cache_status == "MISS"
        assert miss.risk_assessment.confidence_score == miss_score
        assert hit.cache_status == "HIT"
        assert hit.risk_assessment.level == miss.risk_assessment.level == "Unknown"
        assert hit.risk_assessment.confidence_score == pytest.approx(0.91)
        assert 0.90 <= hit.risk_assessment.confidence_score < 0.95

    def test_cached_entry_not_affected_by_caller_mutation(self, tables, stub_generator):
        pipeline = make_pipeline(tables, stub_generator)

        first = run(pipeline)
        first.llm_generated_explanation.summary = "changed"

        assert run(pipeline).llm_generated_explanation.summary == stub_generator.answer
