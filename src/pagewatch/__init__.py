"""Scheduled web page watcher with aggregated SNS alerts."""

__version__ = "0.1.0"
