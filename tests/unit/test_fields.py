"""Field extractors and the field extraction engine."""

from datetime import date

import pytest

from contractdesk.core.classification.classifier import ContractClassifier
from contractdesk.core.fields.counterparty import extract_counterparty
from contractdesk.core.fields.dates import extract_signature_date, extract_start_date, find_dates
from contractdesk.core.fields.engine import FieldExtractionEngine
from contractdesk.core.fields.money import extract_money, pricing_rows
from contractdesk.core.fields.products import extract_products
from contractdesk.core.fields.signatures import extract_signatures
from contractdesk.core.fields.term import derive_end_date, extract_term, months_between
from contractdesk.domain.value_objects import ContractType
from contractdesk.models.classification import ContractClassification
from contractdesk.models.fields import mean_confidence
from contractdesk.utils.company_names import normalize_company_name


def analyze(config, text, file_name="contract.pdf"):
    classification = ContractClassifier(config).classify(text, file_name)
    return FieldExtractionEngine(config).extract(text, classification, file_name)


# --- scenario A ---------------------------------------------------------------


def test_multi_year_pricing_table_totals(config, recurring_text):
    fields = analyze(config, recurring_text)

    assert fields.term_months == 36
    assert fields.total_contract_value == 2_962_500
    assert fields.annual_contract_value == pytest.approx(2_962_500 / (36 / 12))
    assert fields.monthly_amount == pytest.approx(round(987_500 / 12, 2))
    assert fields.sources["total_contract_value"] == "pricing_table"


def test_recurring_contract_fields(config, recurring_text):
    fields = analyze(config, recurring_text)

    assert fields.display_name == "Acme Analytics - Master Services Agreement"
    assert fields.counterparty_name == "Acme Analytics"
    assert fields.start_date == date(2025, 1, 1)
    assert fields.end_date == date(2027, 12, 31)
    assert fields.end_date_derived is True
    assert fields.signature_date == date(2025, 1, 20)
    assert fields.counterparty_signer_name == "Jane Doe"
    assert fields.counterparty_signer_title == "Chief Financial Officer"
    assert fields.internal_signer_name == "Sam Seller"
    assert fields.products == ["Insights", "Compliance"]
    assert fields.parent_product == "Multiple"
    assert fields.product_line == "Insights;Compliance"


# --- scenario B ---------------------------------------------------------------


def test_cab_memorandum_fields(config, cab_text):
    fields = analyze(config, cab_text, "Globex CAB Memorandum.pdf")

    assert fields.contract_type == ContractType.LOI
    assert fields.term_months == 12
    assert fields.sources["term_months"] == "loi_default"
    assert fields.start_date == date(2025, 3, 3)
    assert fields.end_date == date(2026, 3, 2)
    assert fields.counterparty_name == "Globex"
    assert fields.notes == "Customer Advisory Board Agreement"


def test_monetary_fields_are_null_when_excluded(config, cab_text):
    text = cab_text + "\nTotal Contract Value: $250,000\nMonthly fee: $5,000\n"

    fields = analyze(config, text, "Globex CAB Memorandum.pdf")

    assert fields.contract_type == ContractType.LOI
    assert fields.total_contract_value is None
    assert fields.annual_contract_value is None
    assert fields.monthly_amount is None
    assert not fields.has_monetary_values()
    assert "total_contract_value" not in fields.confidence


def test_exclusion_follows_the_classification_flag(config, recurring_text):
    classification = ContractClassification(type=ContractType.LOI, confidence=0.9, exclude_monetary=True)

    fields = FieldExtractionEngine(config).extract(recurring_text, classification, "a.pdf")

    assert not fields.has_monetary_values()
    assert fields.term_months == 36


# --- invariants ---------------------------------------------------------------


@pytest.mark.parametrize(
    "start, term, expected",
    [
        (date(2025, 1, 1), 12, date(2025, 12, 31)),
        (date(2024, 1, 31), 1, date(2024, 2, 28)),
        (date(2024, 2, 29), 12, date(2025, 2, 27)),
        (date(2025, 3, 15), 36, date(2028, 3, 14)),
    ],
)
def test_derive_end_date(start, term, expected):
    assert derive_end_date(start, term) == expected


def test_labelled_end_date_is_not_derived(config):
    text = (
        "Order Form\nEffective Date: 02/01/2025\nEnd Date: 06/30/2026\n"
        "The subscription term is 12 months and renews annually for the services listed."
    )

    fields = analyze(config, text)

    assert fields.end_date == date(2026, 6, 30)
    assert fields.end_date_derived is False


def test_overall_confidence_is_mean_of_populated_entries(config, recurring_text):
    fields = analyze(config, recurring_text)

    values = list(fields.confidence.values())
    assert fields.overall_confidence == pytest.approx(sum(values) / len(values))
    assert 0.0 <= fields.overall_confidence <= 1.0
    assert mean_confidence({}) == 0.0


# --- individual extractors ----------------------------------------------------


def test_find_dates_formats_and_window(config):
    text = "Signed 2024-05-01, 5/2/24, May 3, 2024, 4 May 2024 and 01/01/1999."

    values = [m.value for m in find_dates(text, config)]

    assert values == [date(2024, 5, 1), date(2024, 5, 2), date(2024, 5, 3), date(2024, 5, 4)]


def test_start_date_prefers_label_over_earliest(config):
    text = "Signed 02/20/2025. Start Date: March 1, 2025."
    mentions = find_dates(text, config)

    start = extract_start_date(text, mentions)

    assert start.value == date(2025, 3, 1)
    assert start.source == "labelled_start"
    assert extract_signature_date(mentions).value == date(2025, 3, 1)


def test_start_date_falls_back_to_earliest_mention(config):
    text = "Invoiced March 1, 2025 after signature on 02/20/2025."
    mentions = find_dates(text, config)

    start = extract_start_date(text, mentions)

    assert start.value == date(2025, 2, 20)
    assert start.source == "earliest_date"


@pytest.mark.parametrize(
    "text, expected, source",
    [
        ("The Term of this Agreement is two (2) years.", 24, "term_phrase"),
        ("Services run for 18 months from kickoff.", 18, "duration_phrase"),
        ("This order ends on the third anniversary of the Effective Date.", 36, "anniversary"),
    ],
)
def test_term_phrasing(config, text, expected, source):
    term = extract_term(text, ContractType.RECURRING, config)

    assert term.value == expected
    assert term.source == source


def test_term_from_explicit_dates_snaps_to_standard_term(config):
    term = extract_term("No duration stated.", ContractType.RECURRING, config, date(2025, 1, 1), date(2026, 12, 30))

    assert term.value == 24
    assert term.source == "explicit_dates"
    assert months_between(date(2025, 1, 1), date(2025, 7, 31)) == 7


def test_term_absent_for_recurring_without_evidence(config):
    assert extract_term("No duration stated.", ContractType.RECURRING, config) is None


def test_labelled_money_is_cross_derived_through_term(config):
    values = extract_money("Annual Subscription Fee: $120,000 payable in advance.", 24, config)

    assert values["annual_contract_value"].value == 120_000
    assert values["total_contract_value"].value == 240_000
    assert values["monthly_amount"].value == 10_000


def test_not_to_exceed_amount_is_a_total(config):
    values = extract_money("Fees under this Order are not to exceed $300,000 in aggregate.", 24, config)

    assert values["total_contract_value"].value == 300_000


def test_labelled_total_outranks_not_to_exceed(config):
    text = "A not to exceed $500,000 ceiling applies.\nTotal Fees: $200,000"
    values = extract_money(text, 24, config)

    assert values["total_contract_value"].value == 200_000


def test_pricing_rows_keep_first_occurrence_per_year():
    text = "Year 1: $100,000\nYear 2: $110,000\nSummary: Year 1: $999,999"

    assert pricing_rows(text) == {1: 100_000, 2: 110_000}


def test_pricing_table_without_term_divides_by_row_count(config):
    values = extract_money("Year 1: $100,000\nYear 2: $200,000", None, config)

    assert values["total_contract_value"].value == 300_000
    assert values["annual_contract_value"].value == 150_000


@pytest.mark.parametrize(
    "text, file_name, expected, source",
    [
        ('Order between Contoso Ltd and NORTHWIND TRADERS, Inc. ("Customer")', "x.pdf", "Northwind Traders", "definitional"),
        ("Account Name: Initech LLC\nOther text", "x.pdf", "Initech", "account_label"),
        ('Umbrella Holdings (the "Customer" or "Umbrella")', "x.pdf", "Umbrella", "customer_alias"),
        ("Some text without parties.", "Hooli_CAB_Memorandum.pdf", "Hooli", "cab_filename"),
        ("This agreement is made between Contoso Legal Tech and Vandelay Industries for services.", "x.pdf",
         "Vandelay Industries", "between_parties"),
        ("Stark Industries - Order Form\nServices follow.", "x.pdf", "Stark Industries", "title_line"),
    ],
)
def test_counterparty_strategies(config, text, file_name, expected, source):
    result = extract_counterparty(text, file_name, config)

    assert result.value == expected
    assert result.source == source


def test_counterparty_rejects_internal_company(config):
    assert extract_counterparty('Contoso Legal Tech ("Customer") and nobody else.', "x.pdf", config) is None


def test_signatures_canonicalize_internal_alias(config):
    text = "By: /s/ Samuel Seller\nTitle: VP Sales\n\nName: Wanda Buyer\nTitle: General Counsel\n"

    values = extract_signatures(text, config)

    assert values["internal_signer_name"].value == "Sam Seller"
    assert values["counterparty_signer_name"].value == "Wanda Buyer"
    assert values["counterparty_signer_title"].value == "General Counsel"


def test_internal_signer_falls_back_to_allowlist_scan(config):
    values = extract_signatures("Countersigned electronically by Sam Seller on behalf of Contoso.", config)

    assert values["internal_signer_name"].value == "Sam Seller"
    assert values["internal_signer_name"].source == "allowlist_scan"


def test_single_product_is_its_own_parent(config):
    products, parent = extract_products("Access to the Litigation module.", config)

    assert products.value == ["Litigation"]
    assert parent.value == "Litigation"


def test_contracting_wording_is_not_a_product(config):
    products, parent = extract_products("The contracting parties agree to the Insights subscription.", config)

    assert products.value == ["Insights"]
    assert parent.value == "Insights"


def test_ai_augmented_contracting_is_matched(config):
    products, _ = extract_products("Includes AI-Augmented Contracting seats.", config)

    assert products.value == ["AI Augmented - Contracting"]


def test_normalize_company_name():
    assert normalize_company_name("  ACME HOLDINGS, Inc. ") == "Acme Holdings"
    assert normalize_company_name("IBM Corp") == "IBM"
