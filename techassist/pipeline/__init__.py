"""
Pipeline modules for the retrieval-augmented query path.

Retrieval:  retrieval.py, metadata_filter.py, keyword_fallback.py
Ranking:    reranker.py
Synthesis:  context_builder.py (+ prompts/system_prompts.py)

Orchestrated by: orchestrator.py
"""
