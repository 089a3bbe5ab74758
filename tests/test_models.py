import pytest
from pydantic import ValidationError
from drugreport.models import DrugAnalysisInput, DrugComponent, Report
from drugreport.monitoring import SimpleMonitor


def test_report_requires_components():
    with pytest.raises(ValidationError):
        Report(drug_name="Paracetamol", components=[], ai_summary="text")


def test_report_is_immutable():
    report = Report(drug_name="Paracetamol", components=[DrugComponent(name="Paracetamol")], ai_summary="text")
    with pytest.raises(ValidationError):
        report.ai_summary = "changed"
    assert report.side_effects == []
    assert report.product_name is None


def test_analysis_input_accepts_both_spellings():
    assert DrugAnalysisInput.model_validate({"drugName": "A4-1234"}).drug_name == "A4-1234"
    parsed = DrugAnalysisInput(drug_name="Panadol", medical_conditions="Asthma")
    assert parsed.medical_conditions == "Asthma"


def test_monitor_summary_and_reset():
    monitor = SimpleMonitor()
    monitor.record_request(success=True, response_time_ms=100, endpoint="/report", outcome="report")
    monitor.record_request(success=False, response_time_ms=300, endpoint="/report", outcome="error")

    summary = monitor.get_metrics_summary()
    assert summary["total_requests"] == 2
    assert summary["success_rate"] == 50.0
    assert summary["average_response_time_ms"] == 200.0
    assert summary["outcomes"] == {"report": 1, "error": 1}
    assert len(monitor.get_recent_requests(1)) == 1

    monitor.reset_metrics()
    assert monitor.get_metrics_summary()["total_requests"] == 0
