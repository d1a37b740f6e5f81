"""
Application package: store handle, caching helpers, example suites and runner.
"""
