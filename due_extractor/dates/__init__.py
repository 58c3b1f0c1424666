"""Date normalization and due-date resolution."""
