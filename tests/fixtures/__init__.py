"""
Pytest fixtures for the WwffDirectory test suite.

- directory_rows: upstream header, row builders and CSV rendering
- http_mocking: scripted ``httpx.MockTransport`` server and fetcher factory
"""
