"""FusionCaller call-ingestion service."""
