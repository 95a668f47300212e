"""Data models for clusters and answer-key templates."""
