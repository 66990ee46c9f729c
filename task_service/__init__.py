"""Task tracker REST service."""
