"""
VerseKit - Retrieval Layer

Ranked search and selector resolution on top of the storage contract.
"""

from retrieval.ranker import SearchRanker, merge_matches
from retrieval.service import RetrievalService

__all__ = ["SearchRanker", "merge_matches", "RetrievalService"]
