"""Runtime configuration read from the Lambda environment."""
