"""Match card document rendering and PDF output."""
