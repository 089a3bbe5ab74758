#!/usr/bin/env python3
"""Run the drug report pipeline against the live registry and openFDA."""

import asyncio
import sys
import os

# Add the parent directory to the path so we can import drugreport modules
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from drugreport.app_logging import setup_logging
from drugreport.medical_apis import close_medical_api_client
from drugreport.models import DrugAnalysisInput, ReportError
from drugreport.pipeline import get_drug_report

async def check_report(drug_name: str, conditions: str = None):
    """Print the report for one query."""
    print(f"🧪 Building report for '{drug_name}'...")

    try:
        result = await get_drug_report(DrugAnalysisInput(drug_name=drug_name, medical_conditions=conditions))
    finally:
        await close_medical_api_client()

    if isinstance(result, ReportError):
        print(f"❌ {result.error}")
        return False

    print(f"✅ {result.product_name} ({result.registration_number})")
    print(f"Components: {', '.join(c.name for c in result.components)}")
    print("Side effects:")
    for effect in result.side_effects:
        print(f"  - {effect}")
    print("\nSummary:\n" + result.ai_summary)
    return True

if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: check_report.py <drug name or NAFDAC number> [medical conditions]")
        sys.exit(2)
    setup_logging()
    ok = asyncio.run(check_report(sys.argv[1], sys.argv[2] if len(sys.argv) > 2 else None))
    sys.exit(0 if ok else 1)
