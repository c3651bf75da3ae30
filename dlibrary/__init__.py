"""Digital Library account service."""
