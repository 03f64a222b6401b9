"""
Legal Kernel - request workflow core

Pure domain layer for the legal request approval workflow:
- Request snapshot and status enumerations
- Business calendar configuration
- Fixed request state graph
- Typed exceptions and structured logging
"""

__version__ = "0.1.0"
