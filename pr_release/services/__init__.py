"""Release services: git collaborator, remote resolution, merge set, rendering, reconciliation."""
