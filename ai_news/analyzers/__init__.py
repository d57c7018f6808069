"""Generation-backed enrichment of feed candidates."""

from .augmenter import AugmentationClient, clean_source_label, merge_results, parse_enrichment_response

__all__ = [
    "AugmentationClient",
    "clean_source_label",
    "merge_results",
    "parse_enrichment_response",
]
