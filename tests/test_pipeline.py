"""
Tests for the drug report pipeline.
"""

import pytest
from unittest.mock import patch

from drugreport.models import DrugAnalysisInput, Report, ReportError, ReportSummary, SideEffectBullet
from drugreport.pipeline import condense_side_effects, get_drug_report, sanitize_query, split_bullets
from drugreport.prompts import SAFETY_DISCLAIMER


def _request(drug_name, conditions=None):
    return DrugAnalysisInput(drug_name=drug_name, medical_conditions=conditions)


class TestSanitizeQuery:
    """Test cases for query sanitization."""

    @pytest.mark.parametrize("raw,expected", [
        ("Paracetamol", "Paracetamol"),
        ("  Paracetamol?! ", "Paracetamol"),
        ("Panadol Extra)", "Panadol Extra"),
        ("A4-1234", "A4-1234"),
        ("Vitamin B.", "Vitamin B."),
        ("Co-Trimoxazole -", "Co-Trimoxazole -"),
        ("Café", "Café"),
        ("Café?!", "Café"),
        ("Panadol_", "Panadol"),
        ("Ibuprofène 400", "Ibuprofène 400"),
        ("???", ""),
        ("   ", ""),
        (None, ""),
    ])
    def test_sanitize(self, raw, expected):
        assert sanitize_query(raw) == expected


class TestCondenseSideEffects:
    """Test cases for condensing the side effect list."""

    @pytest.mark.asyncio
    async def test_empty(self, mock_generative_service):
        assert await condense_side_effects([], service=mock_generative_service) == []
        mock_generative_service.run.assert_not_called()

    @pytest.mark.asyncio
    async def test_single_call_for_all_fragments(self, mock_generative_service):
        mock_generative_service.run.return_value = SideEffectBullet(
            bullet_point="- Nausea\n- Liver damage, mainly after overdose\n- nausea"
        )

        effects = await condense_side_effects(
            ["Nausea was reported.", "Severe liver damage may occur with overdose."],
            service=mock_generative_service,
        )

        assert effects == ["Nausea", "Liver damage, mainly after overdose"]
        mock_generative_service.run.assert_called_once()
        blob = mock_generative_service.run.call_args.args[1]["original_effect"]
        assert blob == "Nausea was reported. Severe liver damage may occur with overdose."

    @pytest.mark.asyncio
    async def test_failure_keeps_raw_fragments(self, mock_generative_service):
        raw = ["Nausea was reported.", "Severe liver damage may occur with overdose."]
        assert await condense_side_effects(raw, service=mock_generative_service) == raw

    def test_split_bullets(self):
        assert split_bullets("• Rash\n1. Itching\n2) Headache\n\n* rash") == ["Rash", "Itching", "Headache"]

    @pytest.mark.parametrize("line", [
        "0.5% of patients develop a rash",
        "1.5% of patients reported liver enzyme rises",
        "10.2 mg/L peak levels were linked to tinnitus",
    ])
    def test_split_bullets_keeps_decimals(self, line):
        assert split_bullets(line) == [line]
        assert split_bullets(f"- {line}") == [line]

    @pytest.mark.asyncio
    async def test_condensed_percentages_are_unchanged(self, mock_generative_service):
        mock_generative_service.run.return_value = SideEffectBullet(
            bullet_point="1.5% of patients reported liver enzyme rises"
        )

        effects = await condense_side_effects(
            ["Liver enzyme elevations were seen in 1.5% of patients in clinical trials."],
            service=mock_generative_service,
        )

        assert effects == ["1.5% of patients reported liver enzyme rises"]


class TestGetDrugReport:
    """End-to-end pipeline scenarios with mocked collaborators."""

    @pytest.mark.asyncio
    async def test_scenario_a_report(self, mock_medical_api_client, mock_generative_service):
        mock_generative_service.run.return_value = ReportSummary(
            summary="Paracetamol is an analgesic and antipyretic. Nausea is uncommon. "
                    "Please consult your doctor or pharmacist before use."
        )

        result = await get_drug_report(
            _request("Paracetamol"), api_client=mock_medical_api_client, service=mock_generative_service
        )

        assert isinstance(result, Report)
        assert result.drug_name == "Paracetamol"
        assert result.product_name == "Emzor Paracetamol Tablets"
        assert result.registration_number == "04-0123"
        assert [c.name for c in result.components] == ["Paracetamol"]
        assert result.side_effects == ["Nausea", "Liver damage"]
        assert "consult" in result.ai_summary.lower()
        assert result.timestamp
        mock_medical_api_client.search_adverse_events.assert_awaited_once_with(["Paracetamol"])

    @pytest.mark.asyncio
    async def test_scenario_b_not_found(self, mock_medical_api_client, mock_generative_service):
        mock_medical_api_client.search_registry.return_value = None

        result = await get_drug_report(
            _request("Unobtainium"), api_client=mock_medical_api_client, service=mock_generative_service
        )

        assert isinstance(result, ReportError)
        assert "not found" in result.error
        assert "Unobtainium" in result.error
        mock_medical_api_client.search_adverse_events.assert_not_called()

    @pytest.mark.asyncio
    async def test_scenario_c_no_ingredients(self, mock_medical_api_client, mock_generative_service):
        record = mock_medical_api_client.search_registry.return_value[0]
        mock_medical_api_client.search_registry.return_value = [
            record.model_copy(update={"raw_ingredient_text": "500mg, <br />"})
        ]

        result = await get_drug_report(
            _request("Paracetamol"), api_client=mock_medical_api_client, service=mock_generative_service
        )

        assert isinstance(result, ReportError)
        assert "ingredients" in result.error
        mock_medical_api_client.search_adverse_events.assert_not_called()

    @pytest.mark.asyncio
    async def test_scenario_d_generation_unavailable(self, mock_medical_api_client, mock_generative_service):
        result = await get_drug_report(
            _request("Paracetamol", "Liver disease"), api_client=mock_medical_api_client, service=mock_generative_service
        )

        assert isinstance(result, Report)
        assert "Paracetamol" in result.ai_summary
        assert "Nausea, Liver damage" in result.ai_summary
        assert SAFETY_DISCLAIMER in result.ai_summary

    @pytest.mark.asyncio
    async def test_no_side_effects_is_still_a_report(self, mock_medical_api_client, mock_generative_service):
        mock_medical_api_client.search_adverse_events.return_value = []

        result = await get_drug_report(
            _request("Paracetamol"), api_client=mock_medical_api_client, service=mock_generative_service
        )

        assert isinstance(result, Report)
        assert result.side_effects == []
        assert "Reported side effects: N/A" in result.ai_summary

    @pytest.mark.asyncio
    async def test_validation_error_before_network(self, mock_medical_api_client, mock_generative_service):
        result = await get_drug_report(
            _request(" ?? "), api_client=mock_medical_api_client, service=mock_generative_service
        )

        assert isinstance(result, ReportError)
        assert "enter a drug name" in result.error
        mock_medical_api_client.search_registry.assert_not_called()

    @pytest.mark.asyncio
    async def test_query_is_sanitized_before_lookup(self, mock_medical_api_client, mock_generative_service):
        await get_drug_report(
            _request("  Paracetamol!! "), api_client=mock_medical_api_client, service=mock_generative_service
        )
        mock_medical_api_client.search_registry.assert_awaited_once_with("Paracetamol")

    @pytest.mark.asyncio
    async def test_first_candidate_is_used(self, mock_medical_api_client, mock_generative_service):
        first = mock_medical_api_client.search_registry.return_value[0]
        second = first.model_copy(update={"product_name": "Other", "raw_ingredient_text": "Ibuprofen 200mg"})
        mock_medical_api_client.search_registry.return_value = [first, second]

        result = await get_drug_report(
            _request("Paracetamol"), api_client=mock_medical_api_client, service=mock_generative_service
        )

        assert result.product_name == "Emzor Paracetamol Tablets"
        assert [c.name for c in result.components] == ["Paracetamol"]

    @pytest.mark.asyncio
    async def test_synthesis_fault_is_generation_error(self, mock_medical_api_client, mock_generative_service):
        with patch("drugreport.pipeline.synthesize_report", side_effect=RuntimeError("template missing")):
            result = await get_drug_report(
                _request("Paracetamol"), api_client=mock_medical_api_client, service=mock_generative_service
            )

        assert isinstance(result, ReportError)
        assert "Failed to generate the summary" in result.error

    @pytest.mark.asyncio
    async def test_unexpected_error_is_caught(self, mock_medical_api_client, mock_generative_service):
        mock_medical_api_client.search_adverse_events.side_effect = KeyError("boom")

        result = await get_drug_report(
            _request("Paracetamol"), api_client=mock_medical_api_client, service=mock_generative_service
        )

        assert isinstance(result, ReportError)
        assert "unexpected error" in result.error
