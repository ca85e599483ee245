"""Command-line interface for feedcache."""
