"""Processing of diff chunks into micro commit messages."""

from gcm.processor.chunk_processor import (
    ChunkProcessor,
    aggregate_micro_messages,
    build_chunk_input,
)

__all__ = ["ChunkProcessor", "aggregate_micro_messages", "build_chunk_input"]
