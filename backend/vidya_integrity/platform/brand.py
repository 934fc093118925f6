"""Centralized brand configuration for user-facing copy."""

BRAND_NAME = "Vidya"
BRAND_PRODUCT_NAME = "Assignment Integrity Telemetry"
BRAND_APP_DESCRIPTION = "Per-question behavioral telemetry for assignment submissions"
