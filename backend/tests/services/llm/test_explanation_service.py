"""
Tests for ExplanationService: remote generation, fallback contract and
prompt context. The completion endpoint is simulated with httpx.MockTransport.
"""

import json
import logging

import httpx
import pytest

from pharmaguard.core import config
from pharmaguard.schemas.explanation import ExplanationRequest
from pharmaguard.services.llm import explanation_service
from pharmaguard.services.llm.explanation_service import ExplanationService, generate_explanation
from pharmaguard.services.llm.fallback_table import GENERIC_EXPLANATION
from pharmaguard.services.llm.openai_client import OpenAIClient
from pharmaguard.services.llm.prompt_builder import build_variant_context
from pharmaguard.services.vcf.parser import parse_vcf

VCF = "\n".join([
    "##fileformat=VCFv4.2",
    "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO",
    "chr10\t96521657\trs1799853\tC\tT\t.\tPASS\tGENE=CYP2C9;STAR=*2;RS=rs1799853",
    "chr10\t96541616\trs1057910\tA\tC\t.\tPASS\tGENE=CYP2C9;STAR=*3;RS=rs1057910",
    "chr22\t42130692\trs3892097\tG\tA\t.\tPASS\tGENE=CYP2D6;STAR=*4;RS=rs3892097",
])

COMPLETION = (
    "SUMMARY: Reduced CYP2C9 activity.\n"
    "MECHANISM: Slower S-warfarin hydroxylation.\n"
    "RISK_RATIONALE: Drug accumulates.\n"
    "PATIENT_FRIENDLY: You need a lower dose."
)


@pytest.fixture
def variants():
    return parse_vcf(VCF).variants


@pytest.fixture
def offline_service(offline_settings, fallback_table):
    return ExplanationService(client=OpenAIClient(settings=offline_settings), fallback_table=fallback_table)


class TestOfflineFallback:
    """No credential configured: the fallback table answers."""

    @pytest.mark.asyncio
    async def test_warfarin_pm(self, offline_service, reference_table, variants):
        sections = await offline_service.generate("WARFARIN", "PM", "High Risk", variants, "CYP2C9")

        assert sections.model_dump() == reference_table["WARFARIN"]["PM"]
        assert all(sections.model_dump().values())

    @pytest.mark.asyncio
    async def test_unknown_drug_generic(self, offline_service):
        sections = await offline_service.generate("UNKNOWNDRUG", "PM", "Unknown", [], "CYP2D6")

        assert sections.model_dump() == dict(GENERIC_EXPLANATION)
        assert all(sections.model_dump().values())

    @pytest.mark.asyncio
    async def test_lower_case_inputs(self, offline_service, reference_table):
        sections = await offline_service.generate("codeine", "im", "Moderate", [], "CYP2D6")

        assert sections.model_dump() == reference_table["CODEINE"]["IM"]

    @pytest.mark.asyncio
    async def test_unknown_phenotype_uses_nm(self, offline_service, reference_table):
        sections = await offline_service.generate("AZATHIOPRINE", "Unknown", "Unknown", [], "TPMT")

        assert sections.model_dump() == reference_table["AZATHIOPRINE"]["NM"]

    @pytest.mark.asyncio
    async def test_no_request_is_sent(self, offline_settings, fallback_table):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500)

        client = OpenAIClient(settings=offline_settings, transport=httpx.MockTransport(handler))
        service = ExplanationService(client=client, fallback_table=fallback_table)
        await service.generate("WARFARIN", "PM", "High Risk", [], "CYP2C9")

        assert calls == []

    @pytest.mark.asyncio
    async def test_generate_for_request(self, offline_service, reference_table, variants):
        request = ExplanationRequest(
            drug="CLOPIDOGREL", phenotype="RM", risk_label="Safe", gene="CYP2C19", variants=variants,
        )
        sections = await offline_service.generate_for(request)

        assert sections.model_dump() == reference_table["CLOPIDOGREL"]["RM"]


class TestRemoteGeneration:
    """Credential configured: one completion request, parsed into sections."""

    @pytest.mark.asyncio
    async def test_completion_parsed(self, completion_client, completion_response, fallback_table, variants):
        calls = []

        def handler(request):
            calls.append(request)
            return completion_response(COMPLETION)

        service = ExplanationService(client=completion_client(handler), fallback_table=fallback_table)
        sections = await service.generate("WARFARIN", "IM", "Adjust Dosage", variants, "CYP2C9")

        assert len(calls) == 1
        assert sections.summary == "Reduced CYP2C9 activity."
        assert sections.mechanism == "Slower S-warfarin hydroxylation."
        assert sections.risk_rationale == "Drug accumulates."
        assert sections.patient_friendly == "You need a lower dose."

    @pytest.mark.asyncio
    async def test_successful_call_logs_nothing_at_info(self, completion_client, completion_response, fallback_table, variants, caplog):
        caplog.set_level(logging.INFO)
        service = ExplanationService(
            client=completion_client(lambda request: completion_response(COMPLETION)),
            fallback_table=fallback_table,
        )

        await service.generate("WARFARIN", "IM", "Adjust Dosage", variants, "CYP2C9")

        assert [r for r in caplog.records if r.levelno >= logging.INFO] == []

    @pytest.mark.asyncio
    async def test_request_payload(self, completion_client, completion_response, fallback_table, variants):
        captured = {}

        def handler(request):
            captured["url"] = str(request.url)
            captured["auth"] = request.headers["Authorization"]
            captured["body"] = json.loads(request.content)
            return completion_response(COMPLETION)

        service = ExplanationService(client=completion_client(handler), fallback_table=fallback_table)
        await service.generate("WARFARIN", "IM", "Adjust Dosage", variants, "CYP2C9")

        body = captured["body"]
        assert captured["url"] == "https://llm.test/v1/chat/completions"
        assert captured["auth"] == "Bearer sk-test"
        assert body["model"] == "gpt-3.5-turbo"
        assert body["temperature"] == 0.7
        assert body["max_tokens"] == 1000
        assert [m["role"] for m in body["messages"]] == ["system", "user"]

        prompt = body["messages"][1]["content"]
        assert "- Drug: WARFARIN" in prompt
        assert "- Metabolizer Phenotype: IM" in prompt
        assert "- Risk Level: Adjust Dosage" in prompt
        assert "- Primary Gene: CYP2C9" in prompt
        assert "*2 (rs1799853): Reduced function (30%); *3 (rs1057910): Significantly reduced (90%)" in prompt
        assert "rs3892097" not in prompt

    @pytest.mark.asyncio
    async def test_partial_completion_is_returned(self, completion_client, completion_response, fallback_table):
        """Missing markers are not a failure: the degenerate result is kept"""
        service = ExplanationService(
            client=completion_client(lambda request: completion_response("SUMMARY: Only this.")),
            fallback_table=fallback_table,
        )
        sections = await service.generate("WARFARIN", "PM", "Toxic", [], "CYP2C9")

        assert sections.summary == "Only this."
        assert sections.mechanism == ""
        assert sections.risk_rationale == ""
        assert sections.patient_friendly == ""


class TestRemoteFailureFallsBack:
    """Any remote failure returns the fallback entry, never a mix."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [400, 401, 429, 500, 503])
    async def test_error_status(self, completion_client, completion_response, fallback_table, reference_table, status_code):
        service = ExplanationService(
            client=completion_client(lambda request: completion_response(COMPLETION, status_code=status_code)),
            fallback_table=fallback_table,
        )
        sections = await service.generate("WARFARIN", "PM", "Toxic", [], "CYP2C9")

        assert sections.model_dump() == reference_table["WARFARIN"]["PM"]

    @pytest.mark.asyncio
    async def test_network_error(self, completion_client, fallback_table, reference_table):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        service = ExplanationService(client=completion_client(handler), fallback_table=fallback_table)
        sections = await service.generate("CODEINE", "PM", "Ineffective", [], "CYP2D6")

        assert sections.model_dump() == reference_table["CODEINE"]["PM"]

    @pytest.mark.asyncio
    async def test_timeout(self, completion_client, fallback_table, reference_table):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        service = ExplanationService(client=completion_client(handler), fallback_table=fallback_table)
        sections = await service.generate("FLUOROURACIL", "IM", "Adjust Dosage", [], "DPYD")

        assert sections.model_dump() == reference_table["FLUOROURACIL"]["IM"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        {},
        {"choices": []},
        {"choices": [{"message": {}}]},
        {"choices": [{"message": {"content": None}}]},
    ])
    async def test_unexpected_shape(self, completion_client, fallback_table, payload):
        service = ExplanationService(
            client=completion_client(lambda request: httpx.Response(200, json=payload)),
            fallback_table=fallback_table,
        )
        sections = await service.generate("UNKNOWNDRUG", "PM", "Unknown", [], "CYP2D6")

        assert sections.model_dump() == dict(GENERIC_EXPLANATION)

    @pytest.mark.asyncio
    async def test_non_json_body(self, completion_client, fallback_table, reference_table):
        service = ExplanationService(
            client=completion_client(lambda request: httpx.Response(200, text="<html>gateway</html>")),
            fallback_table=fallback_table,
        )
        sections = await service.generate("SIMVASTATIN", "PM", "Toxic", [], "SLCO1B1")

        assert sections.model_dump() == reference_table["SIMVASTATIN"]["PM"]

    @pytest.mark.asyncio
    async def test_unexpected_client_exception(self, online_settings, fallback_table, reference_table):
        class ExplodingClient(OpenAIClient):
            async def generate_text(self, prompt, system_prompt=""):
                raise RuntimeError("boom")

        service = ExplanationService(client=ExplodingClient(settings=online_settings), fallback_table=fallback_table)
        sections = await service.generate("WARFARIN", "NM", "Safe", [], "CYP2C9")

        assert sections.model_dump() == reference_table["WARFARIN"]["NM"]


class TestVariantContext:

    def test_no_matching_variants(self, variants):
        assert build_variant_context(variants, "TPMT") == "No known variants detected in TPMT"

    def test_at_most_three_variants(self):
        text = "\n".join(
            f"chr6\t{18130000 + i}\trs{i}\tA\tG\t.\tPASS\tGENE=TPMT;STAR=*{i}" for i in range(1, 6)
        )
        context = build_variant_context(parse_vcf(text).variants, "TPMT")

        assert context == "*1 (rs1): Unknown; *2 (rs2): Unknown; *3 (rs3): Unknown"

    def test_gene_match_is_exact(self, variants):
        assert build_variant_context(variants, "cyp2c9") == "No known variants detected in cyp2c9"


class TestGenerateExplanation:
    """Module-level wrapper built from the process configuration."""

    @pytest.fixture(autouse=True)
    def restore_settings(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        config._settings = None
        yield
        config._settings = None

    @pytest.mark.asyncio
    async def test_invalid_environment_value_still_answers(self, monkeypatch, reference_table):
        monkeypatch.setenv("PHARMAGUARD_LLM_TIMEOUT", "0")

        sections = await generate_explanation("WARFARIN", "PM", "High Risk", [], "CYP2C9")

        assert sections.model_dump() == reference_table["WARFARIN"]["PM"]

    @pytest.mark.asyncio
    async def test_service_construction_failure_uses_fallback(self, monkeypatch, reference_table):
        class BrokenClient:
            def __init__(self, *args, **kwargs):
                raise RuntimeError("settings unavailable")

        monkeypatch.setattr(explanation_service, "OpenAIClient", BrokenClient)

        sections = await generate_explanation("CODEINE", "PM", "Toxic", [], "CYP2D6")

        assert sections.model_dump() == reference_table["CODEINE"]["PM"]
