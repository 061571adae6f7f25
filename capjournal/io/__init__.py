"""Import and export formats for CapJournal."""
