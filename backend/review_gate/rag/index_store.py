"""Persisted RAG index: chunks, vectors and metadata in one JSON file.

The index is written wholesale by the indexer and read wholesale by the
retriever.  ``save_index`` writes to a temporary file in the target
directory and renames it over the previous index, so a reader never sees a
half-written file.

File layout::

    {
      "version": 1,
      "embedModel": "nomic-embed-text",
      "dim": 768,
      "createdAt": "2024-05-01T12:00:00+00:00",
      "chunks": [
        {"id": ..., "file": ..., "startLine": 1, "endLine": 40,
         "text": ..., "hash": ..., "vector": [...]}
      ]
    }
"""
import hashlib
import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from review_gate.errors import ErrorKind, ReviewGateError

logger = logging.getLogger(__name__)

INDEX_VERSION = 1
JSON_INDENT = 2


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------

def sha1_hex(text: str) -> str:
    return hashlib.sha1(text.encode("utf-8")).hexdigest()


def chunk_id(file_path: str, start_line: int, end_line: int, text_hash: str) -> str:
    """Content-addressed chunk ID: stable across rebuilds of unchanged text."""
    return sha1_hex(f"{file_path}:{start_line}-{end_line}:{text_hash}")


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class IndexedChunk:
    """A chunk of a source file together with its embedding."""

    id: str
    file: str
    start_line: int
    end_line: int
    text: str
    hash: str
    vector: List[float]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "file": self.file,
            "startLine": self.start_line,
            "endLine": self.end_line,
            "text": self.text,
            "hash": self.hash,
            "vector": list(self.vector),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "IndexedChunk":
        return cls(
            id=str(d["id"]),
            file=str(d["file"]),
            start_line=int(d["startLine"]),
            end_line=int(d["endLine"]),
            text=str(d["text"]),
            hash=str(d["hash"]),
            vector=[float(x) for x in d["vector"]],
        )


@dataclass
class RagIndex:
    """The full index as persisted on disk."""

    embed_model: str
    dim: int
    created_at: str
    chunks: List[IndexedChunk] = field(default_factory=list)
    version: int = INDEX_VERSION

    @property
    def size(self) -> int:
        return len(self.chunks)

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "embedModel": self.embed_model,
            "dim": self.dim,
            "createdAt": self.created_at,
            "chunks": [c.to_dict() for c in self.chunks],
        }

    @classmethod
    def from_dict(cls, d: dict) -> "RagIndex":
        return cls(
            version=int(d["version"]),
            embed_model=str(d["embedModel"]),
            dim=int(d["dim"]),
            created_at=str(d["createdAt"]),
            chunks=[IndexedChunk.from_dict(c) for c in d["chunks"]],
        )


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

def save_index(index: RagIndex, path: Path) -> None:
    """Atomically replace the index file at *path*.

    Raises:
        ReviewGateError: INDEXING when the file cannot be written.
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".index-", suffix=".tmp", dir=path.parent)
    except OSError as exc:
        raise ReviewGateError(ErrorKind.INDEXING, f"Cannot write index {path}: {exc}") from exc

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(index.to_dict(), fh, indent=JSON_INDENT)
        os.replace(tmp_name, path)
    except OSError as exc:
        Path(tmp_name).unlink(missing_ok=True)
        raise ReviewGateError(ErrorKind.INDEXING, f"Cannot write index {path}: {exc}") from exc
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.info("[IndexStore] Saved %d chunks (dim=%d) to %s", index.size, index.dim, path)


def load_index(path: Path) -> RagIndex:
    """Load and validate a previously saved index.

    Raises:
        ReviewGateError: CONFIGURATION when the file is missing, malformed,
            of an unknown version, or holds vectors of the wrong length.
    """
    path = Path(path)
    if not path.exists():
        raise ReviewGateError(ErrorKind.CONFIGURATION, f"Index file not found at {path}")

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
        index = RagIndex.from_dict(payload)
    except OSError as exc:
        raise ReviewGateError(ErrorKind.CONFIGURATION, f"Cannot read index {path}: {exc}") from exc
    except (ValueError, KeyError, TypeError) as exc:
        # json.JSONDecodeError is a ValueError
        raise ReviewGateError(ErrorKind.CONFIGURATION, f"Malformed index {path}: {exc}") from exc

    if index.version != INDEX_VERSION:
        raise ReviewGateError(
            ErrorKind.CONFIGURATION,
            f"Unsupported index version {index.version} in {path} (expected {INDEX_VERSION})",
        )
    for chunk in index.chunks:
        if len(chunk.vector) != index.dim:
            raise ReviewGateError(
                ErrorKind.CONFIGURATION,
                f"Chunk {chunk.id} in {path} has {len(chunk.vector)} dims, index declares {index.dim}",
            )

    logger.info(
        "[IndexStore] Loaded %d chunks (dim=%d, model=%s) from %s",
        index.size, index.dim, index.embed_model, path,
    )
    return index
