"""
Helpers around the content extraction service.

The extraction service itself is an external collaborator. This module turns
its raw text into an ExtractionResult, decides which body an article is
scored on, and derives a heuristic QualityAssessment of that body.
"""

import re
from dataclasses import dataclass

from ..logging import article_context, get_logger
from ..models.article import Article, ExtractionResult, QualityAssessment, QualityLevel

logger = get_logger(__name__)

MIN_EXTRACTED_LENGTH = 100

# Where the scored body came from
SOURCE_EXTRACTION = 'llm_extraction'
SOURCE_ORIGINAL = 'original_content'
SOURCE_DESCRIPTION = 'description'

TECHNICAL_TERMS = [
    'artificial intelligence', 'machine learning', 'neural network',
    'algorithm', 'data', 'research', 'technology', 'innovation',
    'development', 'system', 'platform', 'software', 'hardware',
]

_EXTRACTION_FAILURE_PHRASES = ('unable to extract', 'cannot find', 'no content available')
_DESCRIPTION_FALLBACK_PHRASES = ('description instead', 'using description')
_MARKUP_CHARS = ('<', '{', '[')


@dataclass
class ChosenContent:
    """Body an article is scored on."""
    text: str
    source: str
    extraction_succeeded: bool


def clean_extracted_content(content: str) -> str:
    """Clean extracted content.

    Args:
        content: Raw text returned by the extraction service

    Returns:
        Text without wrapping quotes or "Article content:" style prefixes
    """
    if not content:
        return ""

    content = re.sub(r'^\s*"([^"]*)"?\s*$', r'\1', content)
    content = re.sub(r'^(extracted content|main content|article content):\s*', '', content,
                     flags=re.IGNORECASE)
    content = re.sub(r'\n{3,}', '\n\n', content)
    content = re.sub(r'\s{3,}', ' ', content)
    return content.strip()


def _sentences(text: str) -> list[str]:
    return [s for s in re.split(r'[.!?]+', text) if len(s.strip()) > 10]


def extraction_confidence(content: str) -> float:
    """Estimate how likely extracted text is a real article body.

    Args:
        content: Cleaned extracted text

    Returns:
        Confidence between 0.0 and 1.0
    """
    if not content:
        return 0.0

    confidence = 0.5

    if len(content) > 500:
        confidence += 0.2
    if len(content) > 1000:
        confidence += 0.1
    if len(content) < 100:
        confidence -= 0.3

    sentences = _sentences(content)
    if len(sentences) > 3:
        confidence += 0.1
    if len(sentences) > 10:
        confidence += 0.1

    words = content.split()
    if words and sum(len(word) for word in words) / len(words) > 4:
        confidence += 0.1

    if any(phrase in content for phrase in _EXTRACTION_FAILURE_PHRASES):
        confidence -= 0.4
    if any(phrase in content for phrase in _DESCRIPTION_FALLBACK_PHRASES):
        confidence -= 0.2
    if any(char in content for char in _MARKUP_CHARS):
        confidence -= 0.2

    return round(max(0.0, min(1.0, confidence)), 2)


def build_extraction_result(raw_text: str | None) -> ExtractionResult:
    """Turn extraction service output into an ExtractionResult."""
    cleaned = clean_extracted_content(raw_text or "")
    if len(cleaned) <= MIN_EXTRACTED_LENGTH:
        return ExtractionResult(success=False, confidence=0.0, full_text="")

    return ExtractionResult(
        success=True,
        confidence=extraction_confidence(cleaned),
        full_text=cleaned,
    )


def choose_content(article: Article, min_confidence: float = 0.5) -> ChosenContent:
    """Pick the body used for scoring.

    Extracted text wins when the extraction succeeded with enough confidence;
    otherwise the article's own content, then its description.
    """
    extraction = article.extraction
    if (
        extraction is not None
        and extraction.success
        and extraction.confidence > min_confidence
        and extraction.full_text
    ):
        return ChosenContent(extraction.full_text, SOURCE_EXTRACTION, True)

    if article.content:
        return ChosenContent(article.content, SOURCE_ORIGINAL, False)

    return ChosenContent(article.description, SOURCE_DESCRIPTION, False)


def _level_for(score: float) -> QualityLevel:
    if score >= 0.8:
        return QualityLevel.EXCELLENT
    if score >= 0.6:
        return QualityLevel.GOOD
    if score >= 0.4:
        return QualityLevel.FAIR
    if score >= 0.2:
        return QualityLevel.POOR
    return QualityLevel.VERY_POOR


def assess_content_quality(content: str) -> QualityAssessment:
    """Assess overall content quality.

    Args:
        content: Body text

    Returns:
        Score between 0 and 1, its level, and the reasons that contributed
    """
    if not content:
        return QualityAssessment(score=0.0, level=QualityLevel.POOR,
                                 reasons=['No content available'])

    score = 0.0
    reasons: list[str] = []

    words = content.split()
    sentences = _sentences(content)
    paragraphs = [p for p in re.split(r'\n\s*\n', content) if p.strip()]

    if len(words) > 100:
        score += 0.3
        reasons.append('Sufficient length')
    elif len(words) < 50:
        reasons.append('Content too short')

    if len(sentences) > 5:
        score += 0.2
        reasons.append('Good sentence structure')

    if len(paragraphs) > 2:
        score += 0.1
        reasons.append('Multi-paragraph content')

    words_per_sentence = len(words) / max(len(sentences), 1)
    if 10 < words_per_sentence < 30:
        score += 0.1
        reasons.append('Appropriate sentence complexity')

    unique_words = {word.lower() for word in words}
    if words and len(unique_words) / len(words) > 0.5:
        score += 0.1
        reasons.append('Rich vocabulary')

    lowered = content.lower()
    if sum(1 for term in TECHNICAL_TERMS if term in lowered) > 2:
        score += 0.2
        reasons.append('Contains technical content')

    score = round(score, 2)
    return QualityAssessment(score=score, level=_level_for(score), reasons=reasons)


def attach_extraction(article: Article, raw_text: str | None) -> Article:
    """Return a copy of ``article`` carrying the extraction result for ``raw_text``."""
    result = build_extraction_result(raw_text)
    if not result.success:
        logger.warning("Content extraction unusable", **article_context(article))
    return article.model_copy(update={'extraction': result})
