"""Topic classification for feed items."""

import logging
from typing import Dict, Iterable, List, Optional, Sequence

from ..config import ClassificationConfig
from ..models import ANGULAR, JAVA, OTHER, coerce_topic


logger = logging.getLogger(__name__)

# Exact score ties go to the first topic listed here.
TOPIC_PRIORITY = (ANGULAR, JAVA)


class TopicClassifier:
    """Classifies items as Angular, Java or Other by keyword frequency."""

    def __init__(self, config: Optional[ClassificationConfig] = None):
        """
        Initialize the classifier.

        Args:
            config: Classification configuration (keyword tables)
        """
        self.config = config or ClassificationConfig()
        self.keywords: Dict[str, List[str]] = {
            ANGULAR: _lowered(self.config.angular_keywords),
            JAVA: _lowered(self.config.java_keywords),
        }

    def classify(
        self,
        title: str = "",
        summary: str = "",
        tags: Sequence[str] = (),
        declared_tech: Optional[str] = OTHER,
    ) -> str:
        """
        Assign a topic to an item.

        A declared topic other than "Other" wins outright. Otherwise every
        keyword found in the title, summary and tags adds one point to its
        topic, however often it occurs.

        Args:
            title: Item title
            summary: Plain-text summary
            tags: Item tags
            declared_tech: Topic declared by the source or the raw entry

        Returns:
            "Angular", "Java" or "Other"
        """
        declared = coerce_topic(declared_tech)
        if declared != OTHER:
            return declared

        scores = self.score(self._get_text_content(title, summary, tags))

        best = OTHER
        best_score = 0
        for topic in TOPIC_PRIORITY:
            if scores[topic] > best_score:
                best = topic
                best_score = scores[topic]

        logger.debug(f"Classified '{title}' as {best} (scores={scores})")
        return best

    def score(self, haystack: str) -> Dict[str, int]:
        """Count the distinct keywords of each topic present in a lower-cased text."""
        return {
            topic: sum(1 for keyword in keywords if keyword in haystack)
            for topic, keywords in self.keywords.items()
        }

    def _get_text_content(self, title: str, summary: str, tags: Iterable[str]) -> str:
        """Get combined lower-cased text content."""
        return f"{title or ''} {summary or ''} {' '.join(tags or ())}".lower()


def _lowered(keywords: Iterable[str]) -> List[str]:
    # Duplicates would count twice.
    seen: List[str] = []
    for keyword in keywords:
        keyword = keyword.strip().lower()
        if keyword and keyword not in seen:
            seen.append(keyword)
    return seen


default_classifier = TopicClassifier()


def classify(
    title: str = "",
    summary: str = "",
    tags: Sequence[str] = (),
    declared_tech: Optional[str] = OTHER,
) -> str:
    """Classify using the built-in keyword tables."""
    return default_classifier.classify(title, summary, tags, declared_tech)
