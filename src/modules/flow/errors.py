class ConfigError(ValueError):
    """Invalid or missing load test configuration. Aborts the run before any request is sent."""
    pass
