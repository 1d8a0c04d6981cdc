"""Application services that orchestrate the core components."""
