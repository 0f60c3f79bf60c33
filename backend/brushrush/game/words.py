from __future__ import annotations

import random
from typing import Iterable, Sequence


WORDS_BY_CATEGORY: dict[str, list[str]] = {
    "Animals": ["cat", "dog", "elephant", "tiger", "lion", "bird", "fish", "horse", "rabbit", "bear"],
    "Objects": ["chair", "table", "car", "house", "phone", "book", "computer", "pen", "clock", "lamp"],
    "Food": ["pizza", "burger", "apple", "banana", "cake", "bread", "ice cream", "pasta", "chicken", "salad"],
    "Nature": ["tree", "flower", "mountain", "river", "sun", "moon", "star", "cloud", "rain", "snow"],
    "Actions": ["running", "jumping", "swimming", "dancing", "singing", "reading", "writing", "cooking", "sleeping", "laughing"],
    "Abstract": ["love", "happiness", "freedom", "peace", "hope", "dream", "fear", "anger", "joy", "wisdom"],
}

WORDS_BY_DIFFICULTY: dict[str, list[str]] = {
    "easy": ["cat", "dog", "sun", "car", "house", "tree", "book", "ball", "fish", "bird"],
    "medium": ["elephant", "computer", "mountain", "happiness", "dancing", "cooking", "flower", "river", "clock", "phone"],
    "hard": ["philosophy", "democracy", "ecosystem", "architecture", "psychology", "phenomenon", "inevitable", "consciousness", "metaphor", "transcendence"],
}

DEFAULT_WORDS = ["cat", "dog", "house", "tree", "car", "sun", "moon", "star", "fish", "bird"]

CATEGORIES = tuple(WORDS_BY_CATEGORY)
DIFFICULTIES = (*WORDS_BY_DIFFICULTY, "mixed")


def build_pool(
    custom_words: Sequence[str] | None,
    categories: Sequence[str] | None,
    difficulty: str = "mixed",
) -> list[str]:
    """Union of custom, category and difficulty words, deduplicated in order.

    Unknown categories and difficulties contribute nothing. An empty union
    falls back to DEFAULT_WORDS.
    """
    words: list[str] = [w.strip() for w in (custom_words or []) if w and w.strip()]

    for category in categories or []:
        words.extend(WORDS_BY_CATEGORY.get(category, []))

    if difficulty == "mixed":
        for tier in WORDS_BY_DIFFICULTY.values():
            words.extend(tier)
    else:
        words.extend(WORDS_BY_DIFFICULTY.get(difficulty, []))

    if not words:
        words = list(DEFAULT_WORDS)

    return list(dict.fromkeys(words))


def select_word(
    custom_words: Sequence[str] | None,
    categories: Sequence[str] | None,
    difficulty: str = "mixed",
    exclude: Iterable[str] = (),
    rng: random.Random | None = None,
) -> str:
    """Pick a word uniformly from the pool, avoiding `exclude` while possible."""
    pool = build_pool(custom_words, categories, difficulty)
    used = set(exclude)
    fresh = [w for w in pool if w not in used]
    return (rng or random).choice(fresh or pool)


def word_category(word: str, custom_words: Sequence[str] | None) -> str:
    if custom_words and word in custom_words:
        return "Custom"
    return "Default"
