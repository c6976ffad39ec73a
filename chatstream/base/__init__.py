"""Base layer: errors, logging, transport helpers, models and streaming."""
