"""Pure document utilities: traversal, chunking, diffing, schema helpers."""
