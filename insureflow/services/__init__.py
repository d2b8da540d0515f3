"""Application services implementing the insurance, identification and application workflows."""
