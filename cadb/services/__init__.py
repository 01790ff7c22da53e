"""Builder, database stream, search engine and control language."""
