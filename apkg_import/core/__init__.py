"""Core configuration and the importer error taxonomy."""
