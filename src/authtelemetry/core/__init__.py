"""Core telemetry components, independent of any transport or framework."""
