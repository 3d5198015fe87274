"""Qt front-end for SmoothKit."""
