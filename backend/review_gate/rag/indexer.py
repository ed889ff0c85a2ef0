"""Full-rebuild indexing pipeline for the RAG index.

Enumerates source files, chunks them, embeds every chunk through the
``EmbeddingService`` and atomically replaces the persisted index.

Failure policy:
  * a file that cannot be read, or whose chunks cannot all be embedded, is
    logged and skipped;
  * a vector whose length differs from the first vector's aborts the whole
    build, since a mixed-dimension index cannot be searched.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from review_gate.config import ReviewGateConfig
from review_gate.embeddings.service import EmbeddingService
from review_gate.errors import ErrorKind, ReviewGateError

from .chunker import TextChunk, chunk_text
from .file_matcher import resolve_files
from .index_store import INDEX_VERSION, IndexedChunk, RagIndex, chunk_id, save_index, sha1_hex

logger = logging.getLogger(__name__)

FILE_ENCODING = "utf-8"


class RagIndexer:
    """Builds and persists the index for one repository.

    Args:
        config:     Loaded configuration.
        embedder:   Embedding service (``search_document`` flavour).
        root:       Repository root; glob patterns are relative to it.
        index_path: Destination of the persisted index.
    """

    def __init__(
        self,
        config: ReviewGateConfig,
        embedder: EmbeddingService,
        root: Path,
        index_path: Path,
    ) -> None:
        self._config = config
        self._embedder = embedder
        self._root = Path(root)
        self._index_path = Path(index_path)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resolve_files(self) -> List[str]:
        return resolve_files(self._root, self._config.include_globs, self._config.ignore_globs)

    def build(self) -> Optional[RagIndex]:
        """Rebuild the index from scratch.

        Returns:
            The persisted RagIndex, or None when no files matched (nothing
            is written in that case).

        Raises:
            ReviewGateError: INDEXING on an embedding-dimension mismatch.
        """
        files = self.resolve_files()
        if not files:
            logger.info("[RagIndexer] No files to index.")
            return None

        logger.info(
            "[RagIndexer] build started: files=%d model=%s concurrency=%d",
            len(files), self._embedder.model_id, self._config.embed_concurrency,
        )

        chunks: List[IndexedChunk] = []
        dim = -1
        skipped = 0

        with ThreadPoolExecutor(max_workers=self._config.embed_concurrency) as pool:
            for rel_path in files:
                file_chunks = self._index_file(pool, rel_path)
                if file_chunks is None:
                    skipped += 1
                    continue

                for chunk in file_chunks:
                    if dim == -1:
                        dim = len(chunk.vector)
                    elif len(chunk.vector) != dim:
                        raise ReviewGateError(
                            ErrorKind.INDEXING,
                            f"Inconsistent embedding dimensions: {len(chunk.vector)} vs {dim} "
                            f"({chunk.file}:{chunk.start_line}-{chunk.end_line})",
                        )
                chunks.extend(file_chunks)

        index = RagIndex(
            version=INDEX_VERSION,
            embed_model=self._config.embed_model,
            dim=max(dim, 0),
            created_at=datetime.now(timezone.utc).isoformat(),
            chunks=chunks,
        )
        save_index(index, self._index_path)

        logger.info(
            "[RagIndexer] build done: chunks=%d dim=%d files=%d skipped=%d",
            index.size, index.dim, len(files) - skipped, skipped,
        )
        return index

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _index_file(self, pool: ThreadPoolExecutor, rel_path: str) -> Optional[List[IndexedChunk]]:
        """Chunk and embed one file; None means the file was skipped."""
        try:
            content = (self._root / rel_path).read_text(encoding=FILE_ENCODING)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("[RagIndexer] Failed to read %s: %s", rel_path, exc)
            return None

        pieces = chunk_text(content, self._config.chunk_max_chars, self._config.chunk_overlap_chars)
        if not pieces:
            return []

        try:
            # map() yields in submission order, whatever the completion order.
            vectors = list(pool.map(self._embed_piece, pieces))
        except ReviewGateError as exc:
            if exc.kind is not ErrorKind.EMBEDDING:
                raise
            logger.warning("[RagIndexer] Failed to process file %s: %s", rel_path, exc.message)
            return None

        file_chunks: List[IndexedChunk] = []
        for piece, vector in zip(pieces, vectors):
            text_hash = sha1_hex(piece.text)
            file_chunks.append(IndexedChunk(
                id=chunk_id(rel_path, piece.start_line, piece.end_line, text_hash),
                file=rel_path,
                start_line=piece.start_line,
                end_line=piece.end_line,
                text=piece.text,
                hash=text_hash,
                vector=vector,
            ))

        logger.debug("[RagIndexer] %s -> %d chunks", rel_path, len(file_chunks))
        return file_chunks

    def _embed_piece(self, piece: TextChunk) -> List[float]:
        return self._embedder.embed_text(piece.text)
