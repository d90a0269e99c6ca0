"""Core summarization pipeline: extraction, completion and streaming."""
