"""
Query Governance Service - governed query definitions and field mapping

A configuration-side service for batch reporting providing:
- SQL safety and compliance checks on stored query definitions
- Lifecycle management of shared query definitions under optimistic versioning
- Confidence-scored suggestions mapping source columns to canonical banking fields
- Correlation-tagged audit events for every mutation
"""

__version__ = "0.1.0"
