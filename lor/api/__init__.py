"""
HTTP API
FastAPI application exposing review submission, listing and deletion.
"""
