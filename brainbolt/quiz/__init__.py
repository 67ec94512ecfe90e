"""Session state, adaptive difficulty, scoring and the quiz orchestrator."""
