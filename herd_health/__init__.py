"""Herd health risk scoring and alert dispatch.

This package contains the animal health domain models, the rule-based risk
scoring services and the notification store that feeds the farm dashboard.
"""
