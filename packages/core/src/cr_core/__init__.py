"""Review pipeline: diff collection, prompt building, remote review and rendering."""
