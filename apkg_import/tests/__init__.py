"""Test suite for the .apkg importer."""
