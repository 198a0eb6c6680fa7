"""Service layer helpers backing the pipecache CLI."""
