"""Terminal display components."""
