"""Test suite for the guestbook feed.

This package contains tests for:
- Data types and payload validation
- Configuration resolution
- Form selection and submission normalization
- The forms backend client (mocked transport)
- Pipeline state machine
- End-to-end handler scenarios and error responses
"""
