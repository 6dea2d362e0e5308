"""gsm2env - render Google Cloud Secret Manager secrets as env, JSON, YAML or CSV."""

__version__ = "0.2.0"
