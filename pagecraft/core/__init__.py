"""Business logic: section models, tree operations, storage and services."""
