"""RegiSmart registrar API."""
