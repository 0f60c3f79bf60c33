import random

from brushrush.game.words import (
    DEFAULT_WORDS,
    WORDS_BY_CATEGORY,
    WORDS_BY_DIFFICULTY,
    build_pool,
    select_word,
    word_category,
)


def test_pool_is_union_of_custom_categories_and_tier():
    pool = build_pool(['zeppelin'], ['Animals'], 'hard')
    assert 'zeppelin' in pool
    assert set(WORDS_BY_CATEGORY['Animals']) <= set(pool)
    assert set(WORDS_BY_DIFFICULTY['hard']) <= set(pool)
    assert 'ball' not in pool


def test_mixed_difficulty_uses_every_tier():
    pool = build_pool([], [], 'mixed')
    for tier in WORDS_BY_DIFFICULTY.values():
        assert set(tier) <= set(pool)


def test_pool_is_deduplicated():
    # "cat" is both an Animals word and an easy word
    pool = build_pool(['cat'], ['Animals'], 'easy')
    assert pool.count('cat') == 1
    assert len(pool) == len(set(pool))


def test_unknown_inputs_fall_back_to_default_pool():
    assert build_pool([], ['Spaceships'], 'impossible') == DEFAULT_WORDS
    assert build_pool(None, None, 'nope') == DEFAULT_WORDS


def test_blank_custom_words_are_ignored():
    pool = build_pool(['  ', '', 'kite '], [], 'easy')
    assert 'kite' in pool
    assert '' not in pool


def test_select_word_comes_from_pool():
    rng = random.Random(7)
    pool = build_pool(['kite'], ['Food'], 'medium')
    for _ in range(20):
        assert select_word(['kite'], ['Food'], 'medium', rng=rng) in pool


def test_select_word_avoids_used_words_until_exhausted():
    words = ['one', 'two', 'three']
    # Only custom words plus an unknown tier: pool is exactly the custom list.
    assert select_word(words, [], 'none', exclude=['one', 'two']) == 'three'
    assert select_word(words, [], 'none', exclude=words) in words


def test_word_category():
    assert word_category('kite', ['kite']) == 'Custom'
    assert word_category('cat', ['kite']) == 'Default'
    assert word_category('cat', None) == 'Default'
