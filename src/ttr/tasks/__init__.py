"""Task tree model, document loading and merging."""
