"""CDK constructs and Lambda code for the AppConfig proof of concept."""
