"""Auth feature package: Google identity verification and user records."""
