"""Contract type classification and its override rules."""

from contractdesk.core.classification.classifier import ContractClassifier, normalize_filename
from contractdesk.domain.value_objects import ContractType


def test_cab_memorandum_is_loi_without_monetary_values(config, cab_text):
    classification = ContractClassifier(config).classify(cab_text, "Globex CAB Memorandum.pdf")

    assert classification.type == ContractType.LOI
    assert classification.exclude_monetary is True
    assert classification.confidence >= 0.9
    assert "cab_markers" in classification.applied_overrides


def test_cab_marker_in_filename_alone_forces_loi(config):
    text = "Acme agrees to participate in quarterly product sessions. " * 3

    classification = ContractClassifier(config).classify(text, "Acme_CAB-2025.pdf")

    assert classification.type == ContractType.LOI
    assert classification.exclude_monetary is True


def test_multi_year_pricing_forces_recurring(config, recurring_text):
    classification = ContractClassifier(config).classify(recurring_text, "acme-msa.pdf")

    assert classification.type == ContractType.RECURRING
    assert classification.exclude_monetary is False
    assert classification.confidence >= 0.9
    assert classification.applied_overrides == ["pricing_table"]


def test_amended_and_restated_with_services_is_recurring(config):
    text = (
        "Amended and Restated Order Form. This Amendment amends and extends the prior agreement. "
        "The subscription services continue for the service period stated below."
    )

    classification = ContractClassifier(config).classify(text, "amendment.pdf")

    assert classification.type == ContractType.RECURRING
    assert classification.confidence >= 0.85
    assert "amended_restated" in classification.applied_overrides


def test_amendment_keywords_without_override(config):
    text = "First Amendment. This Addendum amends and extends the Agreement. Modification effective on signature."

    classification = ContractClassifier(config).classify(text, "first-amendment.pdf")

    assert classification.type == ContractType.AMENDMENT
    assert 0.5 < classification.confidence <= 1.0


def test_no_evidence_falls_back_to_recurring_baseline(config):
    classification = ContractClassifier(config).classify("Lorem ipsum dolor sit amet " * 10, "scan.pdf")

    assert classification.type == ContractType.RECURRING
    assert classification.confidence == 0.5
    assert classification.applied_overrides == []


def test_classification_is_deterministic(config, recurring_text, cab_text):
    classifier = ContractClassifier(config)
    for text, name in ((recurring_text, "a.pdf"), (cab_text, "Globex CAB Memorandum.pdf")):
        first = classifier.classify(text, name)
        second = ContractClassifier(config).classify(text, name)
        assert (first.type, first.confidence) == (second.type, second.confidence)


def test_normalize_filename():
    assert normalize_filename("Acme_CAB-Memorandum.v2.pdf") == "acme cab memorandum v2"
