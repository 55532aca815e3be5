"""
vanta-tables test suite.

Test Organization:
    - tests/unit/test_*.py: Unit tests for individual modules, with HTTP
      calls mocked by ``responses``
    - tests/conftest.py: Shared settings, client and API payload fixtures
"""
