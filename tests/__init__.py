"""
Test suite for the flock batch service.

Test Organization:
- integration/ - API integration tests, one module per service area
"""
