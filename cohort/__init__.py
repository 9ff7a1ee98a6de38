"""
Cohort Assistant

Question answering over program/student rosters.

Pipeline:
- Ingest: raw roster text -> StudentRecords + ProgramSummaries -> Chunks
- Index: Chunks -> embeddings -> vector store
- Retrieve: terminology expansion + hybrid (semantic + keyword) search
- Answer: assembled context -> LLM completion

Usage:
    from cohort.common import load_config
    from cohort.service import AssistantService
"""

__version__ = "0.1.0"
