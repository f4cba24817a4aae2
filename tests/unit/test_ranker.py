"""Unit tests for candidate ranking and deduplication."""

import random

import pytest
from kb_matcher.core.ranker import DedupStrategy, Ranker
from kb_matcher.models.entry import KnowledgeEntry, Match, MatchType


def make_match(entry_id, confidence, priority=0, match_type=MatchType.KEYWORD):
    entry = KnowledgeEntry(
        id=entry_id,
        phrasings=[f"Question {entry_id}"],
        answer="Answer",
        priority=priority
    )
    return Match(
        entry=entry,
        confidence=confidence,
        matched_query="query",
        match_type=match_type
    )


class TestRanker:
    """Test cases for the Ranker class."""
    
    @pytest.fixture
    def ranker(self):
        return Ranker()
    
    def test_first_encountered_wins(self, ranker):
        """Test that duplicates keep the first candidate, not the best one."""
        keyword = make_match("vpn", 0.5, match_type=MatchType.KEYWORD)
        fuzzy = make_match("vpn", 0.9, match_type=MatchType.FUZZY)
        
        unique = ranker.deduplicate([keyword, fuzzy])
        
        assert len(unique) == 1
        assert unique[0] is keyword
    
    def test_best_confidence_wins(self):
        """Test the alternative policy keeping the highest confidence."""
        ranker = Ranker(dedup_strategy=DedupStrategy.BEST)
        keyword = make_match("vpn", 0.5, match_type=MatchType.KEYWORD)
        fuzzy = make_match("vpn", 0.9, match_type=MatchType.FUZZY)
        
        unique = ranker.deduplicate([keyword, fuzzy])
        
        assert unique == [fuzzy]
    
    def test_strategy_accepts_string(self):
        """Test that the policy can be given by its configuration name."""
        assert Ranker(dedup_strategy="best").dedup_strategy is DedupStrategy.BEST
    
    def test_sort_by_confidence(self, ranker):
        """Test ordering when confidences are far apart."""
        low = make_match("low", 0.5, priority=100)
        high = make_match("high", 0.9, priority=1)
        
        ranked = ranker.rank([low, high], max_results=5, min_confidence=0.0)
        
        assert [m.entry.id for m in ranked] == ["high", "low"]
    
    def test_close_confidences_sorted_by_priority(self, ranker):
        """Test that priority breaks near-ties within the margin."""
        a = make_match("a", 0.85, priority=1)
        b = make_match("b", 0.80, priority=10)
        
        ranked = ranker.rank([a, b], max_results=5, min_confidence=0.0)
        
        assert [m.entry.id for m in ranked] == ["b", "a"]
    
    def test_equal_confidence_and_priority_is_deterministic(self, ranker):
        """Test that full ties are ordered by entry id regardless of input order."""
        x = make_match("x", 0.7, priority=5)
        y = make_match("y", 0.7, priority=5)
        
        assert [m.entry.id for m in ranker.rank([y, x], 5, 0.0)] == ["x", "y"]
        assert [m.entry.id for m in ranker.rank([x, y], 5, 0.0)] == ["x", "y"]
    
    def test_min_confidence_filter(self, ranker):
        """Test that candidates below the threshold are dropped."""
        ranked = ranker.rank(
            [make_match("a", 0.59), make_match("b", 0.6), make_match("c", 0.95)],
            max_results=5,
            min_confidence=0.6
        )
        
        assert {m.entry.id for m in ranked} == {"b", "c"}
        assert all(m.confidence >= 0.6 for m in ranked)
    
    def test_dedup_happens_before_filter(self, ranker):
        """Test that a weak first candidate hides a strong duplicate."""
        weak = make_match("vpn", 0.4)
        strong = make_match("vpn", 0.9, match_type=MatchType.FUZZY)
        
        assert ranker.rank([weak, strong], max_results=5, min_confidence=0.6) == []
    
    def test_truncation(self, ranker):
        """Test the maximum result count."""
        candidates = [make_match(f"e{i}", 0.3 + i * 0.1) for i in range(6)]
        
        ranked = ranker.rank(candidates, max_results=2, min_confidence=0.0)
        
        assert len(ranked) == 2
        assert ranked[0].entry.id == "e5"
    
    def test_zero_max_results(self, ranker):
        """Test that a non-positive maximum yields nothing."""
        assert ranker.rank([make_match("a", 0.9)], max_results=0, min_confidence=0.0) == []
    
    def test_result_properties(self, ranker):
        """Test uniqueness and the tie-break ordering on a mixed set."""
        candidates = [
            make_match("a", 0.95, priority=1),
            make_match("b", 0.9, priority=8),
            make_match("c", 0.6, priority=3),
            make_match("a", 0.7, priority=1, match_type=MatchType.FUZZY),
            make_match("d", 0.62, priority=9),
        ]
        
        ranked = ranker.rank(candidates, max_results=10, min_confidence=0.5)
        
        ids = [m.entry.id for m in ranked]
        assert len(ids) == len(set(ids))
        assert ids == ["b", "a", "d", "c"]
        for earlier, later in zip(ranked, ranked[1:]):
            if abs(earlier.confidence - later.confidence) < ranker.tie_break_margin:
                assert earlier.entry.priority >= later.entry.priority
            else:
                assert earlier.confidence > later.confidence
    
    def test_priority_chain_across_margin(self, ranker):
        """Test near-ties chained by priority past a wider confidence gap."""
        candidates = [
            make_match("a", 0.90, priority=0),
            make_match("b", 0.85, priority=10),
            make_match("c", 0.78, priority=20),
        ]
        
        ranked = ranker.rank(candidates, max_results=5, min_confidence=0.0)
        
        assert [m.entry.id for m in ranked] == ["c", "b", "a"]
    
    def test_adjacent_ordering_on_random_candidates(self, ranker):
        """Test the adjacent-pair ordering rule over many random candidate sets."""
        rng = random.Random(20240611)
        ids = [f"entry-{i}" for i in range(8)]
        
        for _ in range(500):
            candidates = [
                make_match(
                    rng.choice(ids),
                    round(rng.random(), 2),
                    priority=rng.randint(0, 10),
                    match_type=rng.choice([MatchType.KEYWORD, MatchType.FUZZY])
                )
                for _ in range(rng.randint(0, 12))
            ]
            min_confidence = round(rng.random() * 0.5, 2)
            
            ranked = ranker.rank(candidates, max_results=20, min_confidence=min_confidence)
            
            result_ids = [m.entry.id for m in ranked]
            assert len(result_ids) == len(set(result_ids))
            assert all(min_confidence <= m.confidence <= 1.0 for m in ranked)
            for earlier, later in zip(ranked, ranked[1:]):
                if abs(earlier.confidence - later.confidence) < ranker.tie_break_margin:
                    assert earlier.entry.priority >= later.entry.priority
                else:
                    assert earlier.confidence > later.confidence
