"""
Common building blocks for the HTS classification service.

This package contains reusable, domain-agnostic code:

- configuration loading (environment variables)
- logging configuration
- the OpenAI-compatible chat completion entry point
"""
