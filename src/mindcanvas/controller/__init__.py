"""Controllers: interaction state machine, background workers and agent requests."""
