"""
Kickabout Backend Test Suite

Tests are organized into:
- unit/: Tests for individual functions and methods
- integration/: Tests for API endpoints with services mocked
- fixtures/: Reusable test data and setup
"""
