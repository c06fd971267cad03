"""Clinical metrics aggregation and scoring for hospital-operations dashboards.

This package contains the domain records, the pure aggregators and the
service layer that feeds them from a clinical data store.
"""
