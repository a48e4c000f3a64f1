"""Restaurant ranking by name, distance or the caller's points."""
