"""
Tests for candidate scoring, TOC detection and ordering.
"""

import pytest

from techassist.core.config import RetrievalConfig
from techassist.pipeline.reranker import (
    has_quantitative_value,
    is_toc_chunk,
    rerank_candidates,
    score_text,
    truncate_to_cap,
)
from techassist.schemas.retrieval import Provenance

from conftest import make_candidate


TOC_TEXT = (
    "Table of Contents\n"
    "1 Introduction ........ 1\n"
    "2 Safety Instructions ........ 4\n"
    "3 Installation ........ 9\n"
    "4 Maintenance ........ 17\n"
)

LEADER_ONLY_TEXT = "Intro .... 1 .... Setup .... 2 .... Wiring .... 3 .... 4"


class TestTocDetection:
    def test_page_reference_listing_is_toc(self):
        assert is_toc_chunk(TOC_TEXT) is True

    def test_dense_leader_dots_are_toc(self):
        assert is_toc_chunk(LEADER_ONLY_TEXT) is True

    def test_procedural_prose_is_not_toc(self):
        text = "Disconnect the DC isolator, wait 5 minutes, then remove the cover."
        assert is_toc_chunk(text) is False

    def test_single_ellipsis_is_not_toc(self):
        text = "The display shows 'Starting...' for a few seconds after power-on."
        assert is_toc_chunk(text) is False

    def test_empty_text_is_not_toc(self):
        assert is_toc_chunk("") is False

    def test_thresholds_come_from_config(self):
        strict = RetrievalConfig(toc_min_page_refs=10, toc_min_dot_runs=10)
        assert is_toc_chunk(TOC_TEXT, strict) is False


class TestQuantitativeValues:
    @pytest.mark.parametrize("text", [
        "Torque to 45 Nm.",
        "Keep humidity below 80%.",
        "Replace every 3 months.",
        "Operating range 10-40 °C",
        "Set pressure to 2.5 bar",
        "Rated for 600 V",
    ])
    def test_number_with_unit(self, text):
        assert has_quantitative_value(text) is True

    @pytest.mark.parametrize("text", [
        "See section 4 for details.",
        "Model VX200 supports remote monitoring.",
        "",
    ])
    def test_number_without_unit(self, text):
        assert has_quantitative_value(text) is False


class TestScoreText:
    def test_toc_penalty_never_raises_score(self):
        """A TOC-classified chunk never scores above its unpenalized self."""
        config = RetrievalConfig()
        texts = [
            TOC_TEXT,
            "Check pressure ........ 12\nInspect level ........ 14\n",
            "torque ........ 45 Nm ........ 3\n",
        ]
        for text in texts:
            for base in (0.0, 0.15, 0.4, 0.9, 1.0):
                penalized = score_text(text, base, ["torque"], True, config)
                plain = score_text(text, base, ["torque"], False, config)
                assert penalized <= plain

    def test_bonuses_accumulate(self):
        config = RetrievalConfig()
        text = "Warning: check the pressure every 6 months."
        # warning, check, every, pressure -> 4 procedural indicators
        expected = 0.5 + 4 * config.procedural_bonus + config.keyword_bonus + config.quantitative_bonus
        assert score_text(text, 0.5, ["pressure"], False, config) == pytest.approx(expected)

    def test_keyword_bonus_skipped_for_toc(self):
        config = RetrievalConfig()
        with_kw = score_text("inverter", 0.5, ["inverter"], True, config)
        without_kw = score_text("inverter", 0.5, [], True, config)
        assert with_kw == without_kw == pytest.approx(0.5 * config.toc_penalty)


class TestRerankCandidates:
    def test_torque_question_ranks_quantitative_chunk_first(self):
        """The one hit carrying '45 Nm' gets the quantitative bonus and ranks first."""
        candidates = [
            make_candidate("c1", "The enclosure is rated IP65.", 0.58, retrieval_rank=0),
            make_candidate("c2", "Spare parts are listed in the appendix.", 0.55, retrieval_rank=1),
            make_candidate("c3", "Apply 45 Nm to the mounting hardware.", 0.50, retrieval_rank=2),
            make_candidate("c4", "The warranty card ships with the unit.", 0.53, retrieval_rank=3),
            make_candidate("c5", "Contact the distributor for accessories.", 0.51, retrieval_rank=4),
        ]
        assert not any(is_toc_chunk(c.text) for c in candidates)

        ranked = rerank_candidates(candidates, "What is the torque spec for bolt X?")

        assert ranked[0].id == "c3"
        assert ranked[0].final_score == pytest.approx(0.50 + RetrievalConfig().quantitative_bonus)

    def test_toc_chunk_drops_below_procedural_content(self):
        candidates = [
            make_candidate("toc", TOC_TEXT, 0.85, retrieval_rank=0),
            make_candidate("proc", "Inspect the fan and clean the filter.", 0.40, retrieval_rank=1),
        ]

        ranked = rerank_candidates(candidates, "How do I maintain the fan?")

        assert [c.id for c in ranked] == ["proc", "toc"]
        assert ranked[1].is_toc is True
        assert ranked[1].final_score < ranked[1].similarity

    def test_similarity_is_preserved(self):
        candidates = [
            make_candidate("a", "Replace the filter every 6 months.", 0.73),
            make_candidate("b", "Filter", 0.4, provenance=Provenance.KEYWORD),
        ]
        ranked = rerank_candidates(candidates, "filter replacement interval")
        by_id = {c.id: c for c in ranked}
        assert by_id["a"].similarity == 0.73
        assert by_id["b"].similarity == 0.4

    def test_input_not_mutated(self):
        candidates = [make_candidate("a", "Check the level.", 0.5)]
        rerank_candidates(candidates, "level check")
        assert candidates[0].final_score is None
        assert candidates[0].is_toc is False

    def test_deterministic_order(self):
        candidates = [
            make_candidate(f"c{i}", text, sim, retrieval_rank=i)
            for i, (text, sim) in enumerate([
                ("Same text", 0.5),
                ("Same text", 0.5),
                (TOC_TEXT, 0.9),
                ("Check the pressure gauge.", 0.45),
                ("Same text", 0.5),
            ])
        ]
        first = [c.id for c in rerank_candidates(candidates, "pressure gauge reading")]
        for _ in range(5):
            again = [c.id for c in rerank_candidates(list(candidates), "pressure gauge reading")]
            assert again == first

    def test_tie_breaks_semantic_then_retrieval_rank(self):
        candidates = [
            make_candidate("kw", "Plain words here.", 0.4, Provenance.KEYWORD, retrieval_rank=0),
            make_candidate("sem-late", "Plain words here.", 0.4, Provenance.SEMANTIC, retrieval_rank=3),
            make_candidate("sem-early", "Plain words here.", 0.4, Provenance.SEMANTIC, retrieval_rank=1),
        ]

        ranked = rerank_candidates(candidates, "unrelated question")

        assert [c.id for c in ranked] == ["sem-early", "sem-late", "kw"]

    def test_empty_input(self):
        assert rerank_candidates([], "anything") == []


class TestTruncateToCap:
    def test_caps_long_lists(self):
        candidates = [make_candidate(f"c{i}", "text") for i in range(40)]
        capped = truncate_to_cap(candidates, 30)
        assert len(capped) == 30
        assert capped[0].id == "c0"
        assert capped[-1].id == "c29"

    def test_short_lists_untouched(self):
        candidates = [make_candidate("only", "text")]
        assert truncate_to_cap(candidates, 30) == candidates
