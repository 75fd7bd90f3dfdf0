"""
Test suites package.

This repository keeps `finn_testsuites` importable to support:
  - IDE navigation
  - programmatic runners (e.g., `run_tests.py`)
  - CI/CD module imports

Scenarios run against the public finn.no site and never submit forms.
"""
