"""Go source ingestion: tree-sitter parsing and source units."""
