"""Logging and metrics for rescache."""
