"""Qt views of the mind map."""
