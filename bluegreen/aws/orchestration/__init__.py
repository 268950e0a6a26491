"""Deployment submission, request building and the run state machine."""
