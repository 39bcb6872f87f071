"""Tests for issue relevance scoring."""

from __future__ import annotations

from auto_commit.config.schema import MatchingConfig
from auto_commit.core.relevance_scorer import RelevanceScorer, broad_terms_in_diff
from auto_commit.models.issue import Issue


class TestImportantTerms:
    """Test important term extraction."""

    def test_declarations_and_instantiations(self, sample_diff: str) -> None:
        """Test identifiers after const and new, with their parts."""
        terms = RelevanceScorer().extract_important_terms(sample_diff)

        assert {"apiclient", "client", "authprovider", "auth", "provider", "config"} <= terms

    def test_python_imports_and_classes(self) -> None:
        """Test module names from Python imports and class names."""
        diff = "+from requests.adapters import HTTPAdapter\n+class RetryPolicy:\n"
        terms = RelevanceScorer().extract_important_terms(diff)

        assert {"requests.adapters", "requests", "adapters"} <= terms
        assert {"retrypolicy", "retry", "policy"} <= terms

    def test_require_calls(self) -> None:
        """Test module names from require() calls."""
        terms = RelevanceScorer().extract_important_terms("+const x = require('lodash');\n")
        assert "lodash" in terms

    def test_composite_phrases(self) -> None:
        """Test that phrases and their long words are added."""
        terms = RelevanceScorer().extract_important_terms("+# pick the default model\n")

        assert "default model" in terms
        assert "default" in terms
        assert "model" in terms

    def test_domain_terms_inside_identifiers(self) -> None:
        """Test that domain words are found in compound identifiers."""
        terms = RelevanceScorer().extract_important_terms(
            "+system = build_prompt(commit, format, style)\n"
        )

        assert {"prompt", "commit", "format", "style"} <= terms
        assert "build" not in terms

    def test_domain_terms_are_whole_parts(self) -> None:
        """Test that a domain word inside a longer word is not a term."""
        terms = RelevanceScorer().extract_important_terms("+stylesheet = prompter\n")
        assert not {"style", "prompt"} & terms

    def test_short_terms_excluded(self) -> None:
        """Test that every term is longer than three characters."""
        terms = RelevanceScorer().extract_important_terms("+let id = new Api(db);\n")
        assert all(len(term) > 3 for term in terms)

    def test_no_terms(self) -> None:
        """Test a diff without any recognisable terms."""
        assert RelevanceScorer().extract_important_terms("+x = 1\n") == set()


class TestBroadTerms:
    """Test broad term detection."""

    def test_whole_words_only(self) -> None:
        """Test that broad terms must be whole words of the diff."""
        assert broad_terms_in_diff("+providerName = 1") == []
        assert broad_terms_in_diff("+call the provider") == ["provider"]

    def test_short_words_never_match(self) -> None:
        """Test that api, llm and gpt are too short to earn the bonus."""
        assert broad_terms_in_diff("+call the api with an llm like gpt") == []

    def test_short_word_scores_no_bonus(self) -> None:
        """Test an issue mentioning a short broad term."""
        issue = Issue(number=3, title="API client retries")
        ranked = RelevanceScorer().score([issue], "+# call the api client\n")

        # client in title only; api earns nothing
        assert ranked[0].score == 10

    def test_phrases_need_adjacency(self) -> None:
        """Test that phrases match only with adjacent words."""
        assert "language model" in broad_terms_in_diff("+# a Language-Model wrapper")
        assert "language model" not in broad_terms_in_diff("+model of the language")


class TestScoring:
    """Test issue scoring and ranking."""

    def test_auth_provider_scenario(self, sample_diff: str, sample_issues: list[Issue]) -> None:
        """Test that only the related issue is returned."""
        ranked = RelevanceScorer().score(sample_issues, sample_diff)

        assert [item.number for item in ranked] == [1]
        # title: authprovider, auth, provider; body: provider, auth
        assert ranked[0].score == 40

    def test_commit_vocabulary_scores_title(self) -> None:
        """Test that prompt, commit and style in a title each add the title weight."""
        issue = Issue(number=7, title="Improve prompt for commit style")
        diff = "+system = build_prompt(commit, format, style)\n"
        ranked = RelevanceScorer().score([issue], diff)

        assert [(item.number, item.score) for item in ranked] == [(7, 30)]

    def test_label_weight_per_matching_label(self, sample_diff: str) -> None:
        """Test that each label containing a term adds the label weight."""
        issue = Issue(number=7, title="Unrelated", labels=("auth", "provider-support"))
        ranked = RelevanceScorer().score([issue], sample_diff)

        assert ranked[0].score == 16

    def test_broad_bonus(self) -> None:
        """Test the broad bonus for titles and bodies."""
        diff = "+# tune the config\n"
        issue = Issue(number=4, title="Config cleanup", body="Touches the config")
        ranked = RelevanceScorer().score([issue], diff)

        # term: title 10 + body 5; broad: title 3 + body 1
        assert ranked[0].score == 19

    def test_missing_body_scores_title_only(self, sample_diff: str) -> None:
        """Test that an issue without a body is scored on its title."""
        issue = Issue(number=9, title="AuthProvider crash", body=None)
        ranked = RelevanceScorer().score([issue], sample_diff)

        assert ranked[0].score == 30

    def test_ties_broken_by_number(self, sample_diff: str) -> None:
        """Test that equal scores sort by ascending issue number."""
        issues = [Issue(number=n, title="AuthProvider") for n in (12, 3, 8)]
        ranked = RelevanceScorer().score(issues, sample_diff)

        assert [item.number for item in ranked] == [3, 8, 12]

    def test_sorted_by_score(self, sample_diff: str) -> None:
        """Test descending score order."""
        issues = [
            Issue(number=1, title="client"),
            Issue(number=2, title="AuthProvider client"),
        ]
        ranked = RelevanceScorer().score(issues, sample_diff)

        assert [item.number for item in ranked] == [2, 1]
        assert ranked[0].score > ranked[1].score

    def test_capped_at_five(self, sample_diff: str) -> None:
        """Test that at most five issues are returned."""
        issues = [Issue(number=n, title="AuthProvider") for n in range(1, 9)]
        ranked = RelevanceScorer().score(issues, sample_diff)

        assert [item.number for item in ranked] == [1, 2, 3, 4, 5]

    def test_duplicates_scored_once(self, sample_diff: str) -> None:
        """Test that repeated issue numbers are ignored."""
        issue = Issue(number=5, title="AuthProvider")
        ranked = RelevanceScorer().score([issue, issue], sample_diff)

        assert len(ranked) == 1

    def test_case_insensitive(self, sample_diff: str) -> None:
        """Test that matching ignores case."""
        upper = RelevanceScorer().score([Issue(number=1, title="AUTHPROVIDER")], sample_diff)
        lower = RelevanceScorer().score([Issue(number=1, title="authprovider")], sample_diff)

        assert upper[0].score == lower[0].score

    def test_no_terms_no_results(self, sample_issues: list[Issue]) -> None:
        """Test that a diff without terms scores nothing."""
        assert RelevanceScorer().score(sample_issues, "+x = 1\n") == []

    def test_keywords_do_not_change_scores(
        self, sample_diff: str, sample_issues: list[Issue]
    ) -> None:
        """Test that keywords are diagnostic only."""
        scorer = RelevanceScorer()
        assert scorer.score(sample_issues, sample_diff, ["readme", "flaky"]) == scorer.score(
            sample_issues, sample_diff
        )

    def test_weights_from_config(self, sample_diff: str, sample_issues: list[Issue]) -> None:
        """Test that weights come from MatchingConfig."""
        config = MatchingConfig(
            title_weight=1,
            label_weight=0,
            body_weight=0,
            broad_title_weight=0,
            broad_body_weight=0,
        )
        ranked = RelevanceScorer(config).score(sample_issues, sample_diff)

        assert ranked[0].score == 3

    def test_deterministic(self, sample_diff: str, sample_issues: list[Issue]) -> None:
        """Test that identical inputs rank identically."""
        scorer = RelevanceScorer()
        assert scorer.score(sample_issues, sample_diff) == scorer.score(
            list(reversed(sample_issues)), sample_diff
        )
