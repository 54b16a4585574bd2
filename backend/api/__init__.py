"""HTTP interface for the notification rules pipeline."""
