"""
Detection request helpers: word counting and word-limit enforcement.

Limits are applied before any model is queried, so oversized texts never
reach the paid APIs.
"""

import logging

from fastapi import HTTPException

from app.config import settings

logger = logging.getLogger(__name__)


def count_words(text: str) -> int:
    return len(text.split())


def max_words_for(authenticated: bool) -> int:
    return settings.max_words_authenticated if authenticated else settings.max_words_anonymous


def check_word_limit(text: str, authenticated: bool) -> int:
    """Return the word count, or raise HTTP 400 when the text is empty or too long."""
    if not text.strip():
        raise HTTPException(status_code=400, detail="Text is required")

    word_count = count_words(text)
    max_words = max_words_for(authenticated)

    if word_count > max_words:
        logger.info(f"[LIMIT] Rejected {word_count} words (max {max_words}, auth={authenticated})")
        if authenticated:
            hint = f"up to {max_words:,} words"
        else:
            hint = (
                f"up to {max_words:,} words, or up to "
                f"{settings.max_words_authenticated:,} words when signed in"
            )
        raise HTTPException(
            status_code=400,
            detail={
                "code": "WORD_LIMIT_EXCEEDED",
                "message": f"Text exceeds {max_words:,} word limit. Please use {hint}.",
                "word_count": word_count,
                "max_words": max_words,
            },
        )

    return word_count
