"""
Flavr - Template matcher.

Scores free-text intent against the template catalog. Confidence for a
template is the fraction of its keyword groups found in the intent. The
FIRST template in catalog order to reach the threshold with its anchor
groups present wins; overlap between templates is resolved purely by
declaration order. Matching is
deterministic.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from flavr.normalize import normalize_name, singularize
from flavr.templates.catalog import RECIPE_TEMPLATES, KeywordGroup, RecipeTemplate

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE_THRESHOLD = 0.6
DEFAULT_REFERENCE_COST = 0.015  # USD for one full generation


@dataclass(frozen=True)
class TemplateMatch:
    """Outcome of matching one intent against the catalog."""

    use_template: bool
    confidence: float
    template: RecipeTemplate | None = None
    estimated_savings: float = 0.0


def _group_found(group: KeywordGroup, text: str, singular_text: str) -> bool:
    for keyword in group.keywords:
        if keyword in text or keyword in singular_text or singularize(keyword) in text:
            return True
    return False


class TemplateMatcher:
    """Match intents to structural recipe templates."""

    def __init__(
        self,
        templates: Sequence[RecipeTemplate] = RECIPE_TEMPLATES,
        *,
        threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
        reference_cost: float = DEFAULT_REFERENCE_COST,
    ) -> None:
        self.templates = tuple(templates)
        self.threshold = threshold
        self.reference_cost = reference_cost

    def confidence(self, template: RecipeTemplate, intent: str) -> float:
        """Fraction of the template's keyword groups present in the intent."""
        if not template.pattern:
            return 0.0
        text = normalize_name(intent)
        singular_text = " ".join(singularize(word) for word in text.split())
        found = sum(1 for group in template.pattern if _group_found(group, text, singular_text))
        return found / len(template.pattern)

    def anchored(self, template: RecipeTemplate, intent: str) -> bool:
        """True when every anchor group of the template appears in the intent."""
        text = normalize_name(intent)
        singular_text = " ".join(singularize(word) for word in text.split())
        return all(_group_found(group, text, singular_text) for group in template.anchors)

    def match(self, intent: str) -> TemplateMatch:
        """
        Return the first anchored template reaching the threshold.

        On rejection, `confidence` reports the best score seen.
        """
        best = 0.0
        for template in self.templates:
            confidence = self.confidence(template, intent)
            if confidence >= self.threshold and self.anchored(template, intent):
                logger.info(f"Template match: {template.name} ({confidence:.0%} confidence)")
                return TemplateMatch(
                    use_template=True,
                    confidence=confidence,
                    template=template,
                    estimated_savings=max(0.0, self.reference_cost - template.estimated_cost),
                )
            best = max(best, confidence)

        return TemplateMatch(use_template=False, confidence=best)
