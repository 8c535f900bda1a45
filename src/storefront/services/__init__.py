"""Business services: the rules between HTTP handlers and repositories."""
