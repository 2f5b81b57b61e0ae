"""Shared DynamoDB utilities.

This package centralizes:
- boto3 client/resource construction from explicit settings
- error classification into a small closed taxonomy
- typed, expressive errors for consistent HTTP problem responses
- table lifecycle (idempotent create, wait-for-ready, delete)

"""
