"""Collaborators at the edge of the system: delivery channels and storage."""
