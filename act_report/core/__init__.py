"""
Core modules for the completed-works certificate report.

This package contains usage normalization, aggregation, monetary and
date formatting, report assembly and the generation pipeline.
"""
