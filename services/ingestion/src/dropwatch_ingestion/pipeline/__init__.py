"""Ingestion orchestration."""

from dropwatch_ingestion.pipeline.orchestrator import DropIngestionPipeline, IngestionSummary

__all__ = ["DropIngestionPipeline", "IngestionSummary"]
