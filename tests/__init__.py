"""
Test suite for the rendezvous relay.

This package contains tests organized by type:
- Unit tests for individual components
- Integration tests against a running relay
"""
