"""RAG (Retrieval-Augmented Generation) module for the review gate.

Provides line-bounded chunking, a JSON-persisted embedding index, the
full-rebuild indexing pipeline and cosine-similarity retrieval.
"""
