"""Command-line interface for kvcache."""
