"""S3 Explorer: Cognito-authenticated file browser for a private S3 bucket."""

__version__ = "0.1.0"
