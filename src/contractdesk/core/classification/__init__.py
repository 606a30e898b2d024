"""Contract type classification stage"""

from contractdesk.core.classification.classifier import ContractClassifier, normalize_filename

__all__ = ["ContractClassifier", "normalize_filename"]
