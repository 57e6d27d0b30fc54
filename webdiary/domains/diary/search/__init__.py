"""Full-text indexing, filtering and excerpting for diary entries."""
