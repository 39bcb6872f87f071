"""Core business logic components.

This module exports the main business logic classes:
- CommitWorkflow: Runs the generate-review-commit flow
- IssueSelector: Finds and selects the issue a commit refers to
- RelevanceScorer: Ranks tracker issues against a diff
- KeywordExtractor: Derives search keywords from a diff
- CommitMessageGenerator: Turns a diff into a commit message
- StyleAnalyzer: Learns a style guide from commit history
"""

from auto_commit.core.commit_message import CommitMessageAssembler, CommitMessageGenerator
from auto_commit.core.diff_truncation import DiffTruncator, truncate_diff
from auto_commit.core.issue_selector import IssueSelector, SelectionState
from auto_commit.core.keyword_extractor import KeywordExtractor
from auto_commit.core.relevance_scorer import RelevanceScorer
from auto_commit.core.style_analyzer import StyleAnalyzer
from auto_commit.core.workflow import CommitWorkflow, RunOptions, create_workflow

__all__ = [
    "CommitMessageAssembler",
    "CommitMessageGenerator",
    "CommitWorkflow",
    "DiffTruncator",
    "IssueSelector",
    "KeywordExtractor",
    "RelevanceScorer",
    "RunOptions",
    "SelectionState",
    "StyleAnalyzer",
    "create_workflow",
    "truncate_diff",
]
