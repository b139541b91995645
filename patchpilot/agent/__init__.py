"""Review service built on the Strands agent SDK."""
