"""
Tutorial example suites, each run against an injected ``RedisStore``.
"""
