"""CRM enrichment against the in-memory CRM."""

from contractdesk.core.classification.classifier import ContractClassifier
from contractdesk.core.fields.engine import FieldExtractionEngine
from contractdesk.domain.value_objects import ContractType
from contractdesk.models.fields import ExtractedFieldSet
from contractdesk.services.enrichment_service import rank_candidates


def extract(config, text):
    classification = ContractClassifier(config).classify(text, "contract.pdf")
    return FieldExtractionEngine(config).extract(text, classification, "contract.pdf")


async def test_enrich_resolves_account_contact_and_internal_signer(enrichment, config, recurring_text):
    result = await enrichment.enrich(extract(config, recurring_text))

    assert result.account_id == "001000000000ACM"
    assert result.account_name == "Acme Analytics"
    assert result.account_owner_id == "005000000000AMO"
    assert result.account_owner_name == "Alex Manager"
    assert result.industry == "Software"
    assert result.counterparty_signer_id == "003000000000JAN"
    assert result.internal_signer_id == "005000000000SAM"
    assert result.warnings == []


async def test_substring_match_ranks_the_closest_name(enrichment, fake_crm):
    fake_crm.records["Account"][0]["Name"] = "Acme Analytics Ltd"

    result = await enrichment.resolve_account("Acme Analytics")

    assert result.is_ok()
    assert result.unwrap()["Id"] == "001000000000ACM"
    operators = [c.operator for s in fake_crm.searches for c in s.conditions]
    assert operators == ["=", "like"]


async def test_suffix_stripped_lookup_is_the_last_resort(enrichment):
    result = await enrichment.resolve_account("Acme Analytics Inc.")

    assert result.unwrap()["Id"] == "001000000000ACM"


async def test_unresolved_names_become_warnings(enrichment):
    fields = ExtractedFieldSet(
        contract_type=ContractType.RECURRING,
        counterparty_name="Initrode Systems",
        counterparty_signer_name="Pat Nobody",
        internal_signer_name="Sam Seller",
    )

    result = await enrichment.enrich(fields)

    assert result.account_id is None
    assert not result.account_resolved
    assert result.counterparty_signer_id is None
    assert result.internal_signer_id == "005000000000SAM"
    assert len(result.warnings) == 1
    assert "account lookup failed for 'Initrode Systems'" in result.warnings[0]


async def test_missing_counterparty_is_reported(enrichment):
    result = await enrichment.enrich(ExtractedFieldSet(contract_type=ContractType.LOI))

    assert result.warnings == ["No counterparty name to look up"]


async def test_signer_outside_the_directory_is_not_looked_up(enrichment, fake_crm):
    result = await enrichment.resolve_internal_signer("Alex Manager")

    assert result.is_err()
    assert fake_crm.searches == []


async def test_owner_falls_back_to_directory(enrichment, fake_crm):
    fake_crm.records["User"] = [u for u in fake_crm.records["User"] if u["Name"] != "Olivia Owner"]

    result = await enrichment.resolve_owner("olivia owner")

    assert result.unwrap() == {"Id": "005000000000OWN", "Name": "Olivia Owner"}


async def test_inactive_users_are_ignored(enrichment, fake_crm):
    fake_crm.records["User"].append({"Id": "005000000000OLD", "Name": "Old Timer", "IsActive": False})

    result = await enrichment.resolve_user("Old Timer")

    assert result.is_err()


def test_rank_candidates_single_record_short_circuits():
    record = {"Id": "1", "Name": "Anything"}

    assert rank_candidates("Acme", [record]) is record
