"""
Networking Coach - outreach message helper for students.

This package renders networking message templates, generates personalized
messages with OpenAI, and keeps a per-user history of generated messages
with usage analytics.
"""

__version__ = "0.1.0"
