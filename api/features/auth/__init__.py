"""Auth feature package: identity provider exchange, sessions, and the access gate."""
