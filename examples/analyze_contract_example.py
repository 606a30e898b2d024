"""
Example usage of the offline ContractIngestionService.

This example shows how to:
1. Render a small order form to PDF bytes with PyMuPDF
2. Analyze it without any CRM or chat platform
3. Inspect the classification, fields and confidence map
"""

import asyncio

import pymupdf

from contractdesk.core.config import PipelineConfig
from contractdesk.models.document import SourceDocument
from contractdesk.services.factory import ContractIngestionServiceFactory

ORDER_FORM = [
    "Acme Analytics - Order Form",
    'This Order Form is entered into by Acme Analytics, Inc. ("Customer") and Contoso Legal Tech LLC.',
    "Effective Date: January 1, 2025",
    "The initial term of this Order Form is twenty-four (24) months.",
    "Year 1: $120,000",
    "Year 2: $130,000",
    "Subscription covers the Insights module.",
    "Signed By: Jane Doe",
    "Title: Chief Financial Officer",
]


def render_pdf(lines) -> bytes:
    doc = pymupdf.open()
    page = doc.new_page()
    for i, line in enumerate(lines):
        page.insert_text((54, 72 + 16 * i), line, fontsize=10)
    data = doc.tobytes()
    doc.close()
    return data


async def main():
    """Main example function."""

    # 1. Offline service: no CRM lookups, nothing is cached for creation
    config = PipelineConfig(internal_company_aliases=("Contoso",))
    service = ContractIngestionServiceFactory.create_offline(config)

    # 2. Analyze the rendered document
    document = SourceDocument(data=render_pdf(ORDER_FORM), file_name="acme-order-form.pdf")
    print("📄 Analyzing order form...")
    result = await service.analyze_document(document)

    if result.is_err():
        print(f"❌ Analysis failed: {result.unwrap_err()}")
        return

    analysis = result.unwrap()
    fields = analysis.fields

    # 3. Inspect the results
    print(f"✅ {analysis.classification.type} (confidence {analysis.classification.confidence:.2f})")
    print(f"   Extracted with: {analysis.extraction_method}")
    print(f"   Counterparty:   {fields.counterparty_name}")
    print(f"   Term:           {fields.start_date} to {fields.end_date} ({fields.term_months} months)")
    print(f"   Total value:    {fields.total_contract_value} {fields.currency}")
    print(f"   Annual value:   {fields.annual_contract_value}")
    print(f"   Products:       {fields.product_line}")

    print("\nConfidence map:")
    for name, confidence in sorted(fields.confidence.items()):
        print(f"   {name:<24} {confidence:.2f}  ({fields.sources.get(name)})")
    print(f"\nOverall confidence: {analysis.overall_confidence:.2f}")

    for warning in fields.warnings:
        print(f"⚠️  {warning}")


if __name__ == "__main__":
    asyncio.run(main())
