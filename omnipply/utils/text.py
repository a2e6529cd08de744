from typing import Optional


def count_words(text: Optional[str]) -> int:
    if not text or not text.strip():
        return 0
    return len(text.split())


def validate_word_limit(text: Optional[str], max_words: int) -> bool:
    return count_words(text) <= max_words


def word_count_text(text: Optional[str], max_words: int) -> str:
    return f"{count_words(text)}/{max_words} words"
