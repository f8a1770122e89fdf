"""Domain logic: request validation and response normalization."""
