"""Adapters connecting the core pipeline to sinks, probes and frameworks."""
